from tracking.package import repository  # noqa: F401
