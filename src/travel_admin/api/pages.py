"""Placeholder page shells for guarded and public screens."""

from html import escape

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])

_SHELL = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{title} | Travel Admin</title>
  </head>
  <body>
    <main id="app" data-screen="{screen}">
      <h1>{title}</h1>
    </main>
  </body>
</html>
"""


def _render(screen: str, title: str) -> HTMLResponse:
    return HTMLResponse(_SHELL.format(screen=escape(screen), title=escape(title)))


@router.get("/login", response_class=HTMLResponse)
async def login_page() -> HTMLResponse:
    return _render("login", "Sign in")


@router.get("/register", response_class=HTMLResponse)
async def register_page() -> HTMLResponse:
    return _render("register", "Create account")


@router.get("/verify-email", response_class=HTMLResponse)
async def verify_email_page() -> HTMLResponse:
    return _render("verify-email", "Verify your email")


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page() -> HTMLResponse:
    return _render("dashboard", "Dashboard")
