pytest_plugins = ["repolens.testing.conftest"]
