# math_islands/games/__init__.py
