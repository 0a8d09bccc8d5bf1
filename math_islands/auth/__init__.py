# math_islands/auth/__init__.py
