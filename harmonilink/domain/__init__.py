"""Domain services for mixtapes and their cover assets."""
