"""Hello World -- the simplest rendergate example.

Compile a template from a string and render it with context variables.
Anything printed from context is HTML-escaped.

Run:
    python app.py
"""

from rendergate import Environment, RenderExtension, Renderer

env = Environment(extensions=[RenderExtension(Renderer())])

# Compile from string
template = env.from_string("Hello, {{ name }}!")

# Render with context
output = template.render(name="World")

# Context values are escaped on output
escaped = template.render(name="<script>")


def main() -> None:
    print(output)
    print(escaped)
    print()

    # Multiple renders with different context
    for name in ["Ada", "Grace", "Tom & Jerry"]:
        print(template.render(name=name))


if __name__ == "__main__":
    main()
