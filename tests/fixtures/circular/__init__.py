from pinion import component_scan


@component_scan("tests.fixtures.circular")
class CircularApplication:
    pass
