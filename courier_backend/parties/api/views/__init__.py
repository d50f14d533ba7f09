# parties/api/views/__init__.py
