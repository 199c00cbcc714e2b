pytest_plugins = ["docmigrate.testing.fixtures"]
