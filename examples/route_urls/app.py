"""Route URLs -- path() and url() with compile-time escape decisions.

When every route parameter is written literally in the template, the
generated URL is printed as-is. When a parameter comes from template
data, the URL passes through the escape gate, so a hostile value cannot
break out of the attribute it is printed into.

Run:
    python app.py
"""

from urllib.parse import urlencode

from rendergate import Environment, GeneratedUrl, RenderExtension, Renderer


class Router:
    """Tiny URL generator: ``/route?param=value``, cacheable per route."""

    base_url = "https://example.com"

    def generate(self, name, parameters=None, options=None):
        options = options or {}
        query = urlencode(parameters or {}, safe="<>\"'")
        path = f"/{name.replace('.', '/')}" + (f"?{query}" if query else "")
        url = self.base_url + path if options.get("absolute") else path
        return GeneratedUrl(url).add_cache_tags([f"route:{name}"])


extension = RenderExtension(Renderer()).set_url_generator(Router())
env = Environment(extensions=[extension])

template = env.from_string(
    '<a href="{{ path("search", {"q": "books", "page": 2}) }}">Books</a>\n'
    '<a href="{{ path("search", {"q": query}) }}">Results</a>\n'
    '<link rel="canonical" href="{{ url("front") }}">'
)

result = template.render_with_metadata(query='"><script>')
html = str(result)


def main() -> None:
    print(html)
    print()
    print(f"Cache-Tags: {' '.join(result.metadata.tags)}")


if __name__ == "__main__":
    main()
