"""Client configuration: the pydantic model and its YAML loader."""
