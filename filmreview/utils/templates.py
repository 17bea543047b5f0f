"""
Jinja2 template rendering shared by the routes and the error handlers
"""
from pathlib import Path
from fastapi import Request
from fastapi.templating import Jinja2Templates

PACKAGE_DIR = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
STATIC_DIR = PACKAGE_DIR / "static"

GENERIC_ERROR = "Oops. Something went wrong."

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(request: Request, name: str, status_code: int = 200, **context):
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def render_error(request: Request, status_code: int = 500, message: str = GENERIC_ERROR):
    return render(request, "error.html", status_code=status_code, error=message)
