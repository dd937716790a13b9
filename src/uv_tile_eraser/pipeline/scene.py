# ABOUTME: Minimal object hierarchy and mesh renderer targets
# ABOUTME: Lets the pipeline discover eraser configurations under a root object

from dataclasses import dataclass, field
from typing import Any, Hashable, Iterator, List, Optional, Type

from ..mesh_data import MeshGeometry


@dataclass(eq=False)
class MeshRenderer:
    """
    A renderer slot holding a mesh reference and its materials.

    materials[i] is the material of submesh i. The pipeline replaces `mesh`
    with the filtered copy; the previous mesh object is left untouched.
    """
    name: str
    mesh: Optional[MeshGeometry] = None
    materials: Optional[List[Hashable]] = None


@dataclass(eq=False)
class SceneNode:
    """Object in a hierarchy carrying arbitrary components."""
    name: str
    components: List[Any] = field(default_factory=list)
    children: List['SceneNode'] = field(default_factory=list)

    def add_child(self, child: 'SceneNode') -> 'SceneNode':
        self.children.append(child)
        return child

    def walk(self) -> Iterator['SceneNode']:
        """Depth-first pre-order traversal, starting with this node."""
        yield self
        for child in self.children:
            yield from child.walk()


def iter_components(root: SceneNode, kind: Type) -> Iterator[Any]:
    """Every component of the given type in the hierarchy under root (inclusive)."""
    for node in root.walk():
        for component in node.components:
            if isinstance(component, kind):
                yield component
