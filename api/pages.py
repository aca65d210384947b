"""
HTML pages for the Kitchen Hand Guide.

Every value taken from the database or a form is escaped here; handlers pass
plain model objects and strings.
"""

from html import escape
from typing import Callable, Iterable, Mapping, Optional, Sequence

from domain.enums import PrepCategory, Shift
from domain.models import Preparation, PreparationStep, Product
from domain.schemas import AuthenticatedUser

Resolver = Callable[[str], str]

STEP_FIELD_ROWS = 5


def _identity(reference: str) -> str:
    return reference


def _nav(user: Optional[AuthenticatedUser]) -> str:
    links = [
        '<a href="/">Products</a>',
        '<a href="/preparations">Preparations</a>',
        '<form action="/search" method="get" class="search">'
        '<input type="search" name="q" placeholder="Search">'
        '<button type="submit">Go</button></form>',
    ]
    if user is not None:
        links.append(f'<span class="user">{escape(user.username)}</span>')
        links.append('<a href="/logout">Log out</a>')
    else:
        links.append('<a href="/login">Log in</a>')
    return "<nav>" + " ".join(links) + "</nav>"


def layout(title: str, body: str, user: Optional[AuthenticatedUser] = None) -> str:
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en"><head><meta charset="utf-8">'
        f"<title>{escape(title)} | Kitchen Hand Guide</title>"
        '<link rel="stylesheet" href="/static/style.css">'
        "</head><body>"
        f"{_nav(user)}<main><h1>{escape(title)}</h1>{body}</main>"
        "</body></html>"
    )


def _error_box(error: Optional[str]) -> str:
    if not error:
        return ""
    return f'<p class="error" role="alert">{escape(error)}</p>'


def _text_input(name: str, label: str, values: Mapping[str, str], kind: str = "text") -> str:
    value = escape(values.get(name, "") or "")
    return (
        f'<label for="{name}">{escape(label)}</label>'
        f'<input type="{kind}" id="{name}" name="{name}" value="{value}">'
    )


def _textarea(name: str, label: str, values: Mapping[str, str]) -> str:
    value = escape(values.get(name, "") or "")
    return (
        f'<label for="{name}">{escape(label)}</label>'
        f'<textarea id="{name}" name="{name}">{value}</textarea>'
    )


def _select(name: str, label: str, options: Iterable, values: Mapping[str, str]) -> str:
    chosen = values.get(name, "")
    rendered = []
    for option in options:
        selected = " selected" if option.value == chosen else ""
        rendered.append(
            f'<option value="{option.value}"{selected}>{option.value.capitalize()}</option>'
        )
    return (
        f'<label for="{name}">{escape(label)}</label>'
        f'<select id="{name}" name="{name}">{"".join(rendered)}</select>'
    )


def _picture_input(name: str = "picture", label: str = "Picture") -> str:
    return (
        f'<label for="{name}">{escape(label)}</label>'
        f'<input type="file" id="{name}" name="{name}" accept=".jpg,.jpeg,.png,.webp">'
    )


def _image(url: Optional[str], alt: str) -> str:
    if not url:
        return ""
    return f'<img src="{escape(url)}" alt="{escape(alt)}">'


def _multiline(text: str) -> str:
    return "<br>".join(escape(line) for line in (text or "").splitlines())


# ============================================================================
# Products
# ============================================================================


def product_list(products: Sequence[Product], user: Optional[AuthenticatedUser] = None) -> str:
    if products:
        items = "".join(
            f'<li><a href="/product/{p.id}">{escape(p.product_name)}</a>'
            f" <span>{escape(p.supplier_name)}</span>"
            f" <span>{escape(p.location)}</span></li>"
            for p in products
        )
        body = f'<ul class="products">{items}</ul>'
    else:
        body = "<p>No products yet.</p>"
    if user is not None:
        body = '<p><a href="/product/new">Add product</a></p>' + body
    return layout("Products", body, user)


def product_form(
    user: Optional[AuthenticatedUser],
    error: Optional[str] = None,
    values: Optional[Mapping[str, str]] = None,
) -> str:
    values = values or {}
    body = (
        _error_box(error)
        + '<form action="/product" method="post" enctype="multipart/form-data">'
        + _text_input("supplier_name", "Supplier name", values)
        + _text_input("product_name", "Product name", values)
        + _text_input("location", "Location", values)
        + _textarea("description", "Description", values)
        + _picture_input()
        + '<button type="submit">Save product</button></form>'
    )
    return layout("New product", body, user)


def product_detail(
    product: Product, user: Optional[AuthenticatedUser] = None, resolve: Resolver = _identity
) -> str:
    body = (
        _image(resolve(product.picture_url), product.product_name)
        + "<dl>"
        + f"<dt>Supplier</dt><dd>{escape(product.supplier_name)}</dd>"
        + f"<dt>Location</dt><dd>{escape(product.location)}</dd>"
        + f"<dt>Description</dt><dd>{_multiline(product.description)}</dd>"
        + "</dl>"
    )
    return layout(product.product_name, body, user)


# ============================================================================
# Preparations
# ============================================================================


def preparation_list(
    preparations: Sequence[Preparation], user: Optional[AuthenticatedUser] = None
) -> str:
    if preparations:
        items = "".join(
            f'<li><a href="/preparation/{p.id}">{escape(p.name)}</a>'
            f" <span>{p.category.value}</span>"
            f" <span>{p.shift.value}</span></li>"
            for p in preparations
        )
        body = f'<ul class="preparations">{items}</ul>'
    else:
        body = "<p>No preparations yet.</p>"
    if user is not None:
        body = '<p><a href="/preparation/new">Add preparation</a></p>' + body
    return layout("Preparations", body, user)


def preparation_form(
    user: Optional[AuthenticatedUser],
    error: Optional[str] = None,
    values: Optional[Mapping[str, str]] = None,
) -> str:
    values = values or {}
    step_rows = "".join(
        '<fieldset class="step">'
        + f"<legend>Step {n}</legend>"
        + _textarea(f"step_description_{n}", "Instruction", values)
        + _picture_input(f"step_image_{n}", "Step picture")
        + "</fieldset>"
        for n in range(1, STEP_FIELD_ROWS + 1)
    )
    body = (
        _error_box(error)
        + '<form action="/preparation" method="post" enctype="multipart/form-data">'
        + _text_input("name", "Preparation name", values)
        + _select("category", "Category", PrepCategory, values)
        + _select("shift", "Shift", Shift, values)
        + _text_input("location", "Location", values)
        + _textarea("steps", "Method", values)
        + _picture_input()
        + step_rows
        + '<button type="submit">Save preparation</button></form>'
    )
    return layout("New preparation", body, user)


def _step_items(preparation: Preparation, steps: Sequence[PreparationStep]) -> str:
    if not steps:
        return "<p>No steps yet.</p>"
    items = "".join(
        f'<li value="{s.step_number}">'
        f'<a href="/preparation/{preparation.id}/step/{s.id}">{_multiline(s.description)}</a></li>'
        for s in steps
    )
    return f'<ol class="steps">{items}</ol>'


def preparation_detail(
    preparation: Preparation,
    steps: Sequence[PreparationStep],
    user: Optional[AuthenticatedUser] = None,
    resolve: Resolver = _identity,
) -> str:
    picture = _image(resolve(preparation.picture_url), preparation.name) if preparation.picture_url else ""
    body = (
        picture
        + "<dl>"
        + f"<dt>Category</dt><dd>{preparation.category.value}</dd>"
        + f"<dt>Shift</dt><dd>{preparation.shift.value}</dd>"
        + f"<dt>Location</dt><dd>{escape(preparation.location)}</dd>"
        + f"<dt>Method</dt><dd>{_multiline(preparation.steps)}</dd>"
        + "</dl><h2>Steps</h2>"
        + _step_items(preparation, steps)
    )
    if user is not None:
        body += f'<p><a href="/preparation/{preparation.id}/step/new">Add step</a></p>'
    return layout(preparation.name, body, user)


def step_list(
    preparation: Preparation,
    steps: Sequence[PreparationStep],
    user: Optional[AuthenticatedUser] = None,
) -> str:
    body = (
        f'<p><a href="/preparation/{preparation.id}">Back to {escape(preparation.name)}</a></p>'
        + _step_items(preparation, steps)
    )
    return layout(f"Steps for {preparation.name}", body, user)


def step_form(
    preparation: Preparation,
    user: Optional[AuthenticatedUser],
    error: Optional[str] = None,
    values: Optional[Mapping[str, str]] = None,
) -> str:
    values = values or {}
    body = (
        _error_box(error)
        + f'<form action="/preparation/{preparation.id}/step" method="post" '
        'enctype="multipart/form-data">'
        + _text_input("step_number", "Step number", values, kind="number")
        + _textarea("description", "Instruction", values)
        + _picture_input()
        + '<button type="submit">Save step</button></form>'
    )
    return layout(f"New step for {preparation.name}", body, user)


def step_detail(
    preparation: Preparation,
    step: PreparationStep,
    user: Optional[AuthenticatedUser] = None,
    resolve: Resolver = _identity,
) -> str:
    picture = _image(resolve(step.picture_url), f"Step {step.step_number}") if step.picture_url else ""
    body = (
        f'<p><a href="/preparation/{preparation.id}">Back to {escape(preparation.name)}</a></p>'
        + picture
        + f"<p>{_multiline(step.description)}</p>"
    )
    return layout(f"{preparation.name}: step {step.step_number}", body, user)


# ============================================================================
# Search
# ============================================================================


def search_results(
    query: str,
    products: Sequence[Product],
    preparations: Sequence[Preparation],
    user: Optional[AuthenticatedUser] = None,
) -> str:
    if not query.strip():
        return layout("Search", "<p>Enter a search term.</p>", user)
    if not products and not preparations:
        body = f"<p>Nothing matches &quot;{escape(query)}&quot;.</p>"
    else:
        product_items = "".join(
            f'<li><a href="/product/{p.id}">{escape(p.product_name)}</a></li>' for p in products
        )
        preparation_items = "".join(
            f'<li><a href="/preparation/{p.id}">{escape(p.name)}</a></li>' for p in preparations
        )
        body = (
            f"<h2>Products ({len(products)})</h2><ul>{product_items}</ul>"
            f"<h2>Preparations ({len(preparations)})</h2><ul>{preparation_items}</ul>"
        )
    return layout(f"Search: {query}", body, user)


# ============================================================================
# Accounts
# ============================================================================


def login_form(error: Optional[str] = None, username: str = "") -> str:
    body = (
        _error_box(error)
        + '<form action="/login" method="post">'
        + _text_input("username", "Username", {"username": username})
        + _text_input("password", "Password", {}, kind="password")
        + '<button type="submit">Log in</button></form>'
    )
    return layout("Log in", body)


def register_form(error: Optional[str] = None, values: Optional[Mapping[str, str]] = None) -> str:
    values = values or {}
    body = (
        _error_box(error)
        + '<form action="/register" method="post">'
        + _text_input("username", "Username", values)
        + _text_input("email", "Email", values, kind="email")
        + _text_input("password", "Password", {}, kind="password")
        + _text_input("confirm_password", "Confirm password", {}, kind="password")
        + '<button type="submit">Create account</button></form>'
    )
    return layout("Create account", body)


def error_page(
    title: str, message: str, status_code: int, user: Optional[AuthenticatedUser] = None
) -> str:
    body = f'<p class="error">{escape(message)}</p>'
    if status_code == 401:
        body += '<p><a href="/login">Log in</a></p>'
    else:
        body += '<p><a href="/">Back to products</a></p>'
    return layout(title, body, user)
