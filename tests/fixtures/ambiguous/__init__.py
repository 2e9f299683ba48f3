from pinion import component_scan


@component_scan("tests.fixtures.ambiguous")
class AmbiguousApplication:
    pass
