"""YAML config with defaults from config/config.yaml.example."""
