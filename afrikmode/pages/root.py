"""Root landing page with links to docs and cache endpoints."""

from html import escape


def render_root_page(app_name: str) -> str:
    """Return HTML for the root landing page."""
    name = escape(app_name)
    return f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{name}</title>
    <style>
        body {{
            font-family: system-ui, sans-serif;
            margin: 0;
            background: #000;
            color: #e0e0e0;
            padding: 2rem 1rem;
        }}
        .wrap {{ max-width: 560px; margin: 0 auto; }}
        h1 {{ color: #fff; font-weight: 600; }}
        a {{ color: #7cc4ff; }}
        li {{ margin: 0.4rem 0; }}
    </style>
</head>
<body>
    <div class="wrap">
        <h1>{name}</h1>
        <p>AfrikMode cache service.</p>
        <ul>
            <li><a href="/docs">API documentation</a></li>
            <li><a href="/api/v1/health/ready">Readiness</a></li>
            <li><a href="/api/v1/cache/stats">Cache stats</a></li>
        </ul>
    </div>
</body>
</html>
"""
