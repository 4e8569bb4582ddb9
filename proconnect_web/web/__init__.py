"""Server-rendered pages, HTMX partials and the dashboard route guard"""
