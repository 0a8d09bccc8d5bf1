# math_islands/games/number_target/__init__.py
