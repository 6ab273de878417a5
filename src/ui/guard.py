"""Route protection for the Streamlit pages."""

PROTECTED_PAGES = frozenset({"home"})
GUEST_ONLY_PAGES = frozenset({"login", "signup"})


def resolve_redirect(page: str, authenticated: bool) -> str | None:
    """Return the page to redirect to, or ``None`` to stay on *page*.

    Signed-out visitors to the dashboard go to ``login``; signed-in users
    opening ``login`` or ``signup`` go to ``home``.
    """
    if page in PROTECTED_PAGES and not authenticated:
        return "login"
    if page in GUEST_ONLY_PAGES and authenticated:
        return "home"
    return None
