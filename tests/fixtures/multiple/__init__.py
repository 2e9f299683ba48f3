from pinion import component_scan


@component_scan("tests.fixtures.multiple")
class MultipleApplication:
    pass
