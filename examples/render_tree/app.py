"""Render tree -- print render nodes from a template and collect metadata.

A page template prints a mix of values: plain text from the user, a
render node built by application code, and a link that carries its own
cache tags. Every node is evaluated once; its cache tags, contexts,
max-age and attached libraries end up on the rendered output, ready to
be turned into response headers.

Run:
    python app.py
"""

from rendergate import Environment, GeneratedLink, RenderExtension, Renderer


def card(node: dict) -> dict:
    """Expand a ``#type: card`` node into markup."""
    return {
        **node,
        "#prefix": '<div class="card">',
        "#suffix": "</div>",
        "#attached": {"library": ["theme/card"]},
    }


renderer = Renderer({"card": card})
env = Environment(extensions=[RenderExtension(renderer)])

template = env.from_string(
    "<h1>{{ title }}</h1>\n"
    "{{ attach_library('theme/page') }}"
    "{{ content }}\n"
    "{{ author_link }}\n"
    "{{ content }}"
)

content = {
    "#type": "card",
    "#cache": {"tags": ["node:1"], "contexts": ["user.roles"], "max-age": 3600},
    "body": {"#plain_text": "Fish & chips <3"},
    "footer": {"#markup": "<small>2 comments</small>", "#cache": {"tags": ["comments:1"]}},
}

author_link = GeneratedLink('<a href="/user/7">Ada</a>').add_cache_tags(["user:7"])

result = template.render_with_metadata(
    title="Fish & chips",
    content=content,
    author_link=author_link,
)

html = str(result)
headers = {
    "Cache-Tags": " ".join(result.metadata.tags),
    "Vary-Contexts": " ".join(result.metadata.contexts),
    "Max-Age": str(result.metadata.max_age),
}


def main() -> None:
    print(html)
    print()
    for name, value in headers.items():
        print(f"{name}: {value}")
    print(f"Libraries: {', '.join(result.metadata.attachments['library'])}")


if __name__ == "__main__":
    main()
