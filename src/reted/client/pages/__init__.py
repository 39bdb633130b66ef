"""Sub-pages: Home, Talk and Search.

Each sub-page module exposes the same functions: ``decode`` (service JSON to
model), ``update`` (message and model to model and commands), ``title`` and
``view``. The navigator never looks inside the models.
"""
