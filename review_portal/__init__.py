"""Assignment submission and review portal."""
