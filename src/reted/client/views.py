"""Page views.

Text rendering of the navigator state. A loaded page dispatches to the
render function of its variant; a page with a navigation in flight always
shows the loading indicator.
"""

from reted.client.navigator import SUB_PAGES, Model, Page, PageKind, Transition

HEADER = "ReTed  [home]  [search]"
FOOTER = "[random talk]"
LOADING = "Loading..."


def view(model: Model) -> str:
    """Render the whole screen: header, current page and footer."""
    return "\n\n".join([HEADER, render_status(model), FOOTER])


def render_status(model: Model) -> str:
    status = model.status
    if status.transition is Transition.REDIRECT_FROM:
        return render_loading()
    return render_page(status.page)


def render_page(page: Page) -> str:
    if page.kind is PageKind.BLANK:
        return render_blank()
    if page.kind is PageKind.NOT_FOUND:
        return render_not_found()
    if page.kind is PageKind.ERRORED:
        return render_errored()
    return SUB_PAGES[page.kind].view(page.model)


def render_loading() -> str:
    return LOADING


def render_blank() -> str:
    return ""


def render_not_found() -> str:
    return "Not found.\nThe page you are looking for does not exist."


def render_errored() -> str:
    return "Something went wrong.\nPlease try again later."
