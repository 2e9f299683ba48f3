from pinion import component_scan


@component_scan("tests.fixtures.childparent")
class ChildParentApplication:
    pass
