# math_islands/home/__init__.py
