"""Front end: routing, the page navigator, sub-pages, views and runtime."""
