# math_islands/progress/__init__.py
