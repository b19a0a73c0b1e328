# auth_sdk/__init__.py
