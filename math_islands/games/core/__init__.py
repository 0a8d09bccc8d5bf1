# math_islands/games/core/__init__.py
