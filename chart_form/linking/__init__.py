"""Parent/child linking of generated observations."""

from chart_form.linking.linker import RelationshipLinker

__all__ = ["RelationshipLinker"]
