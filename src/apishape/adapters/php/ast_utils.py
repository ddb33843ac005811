"""PHP AST utility helpers."""

from __future__ import annotations

from tree_sitter import Node

from apishape.core.models import ClassKind, Visibility

CLASS_LIKE_NODES = (
    "class_declaration",
    "interface_declaration",
    "trait_declaration",
    "enum_declaration",
)

NAME_NODES = ("name", "qualified_name")


class PhpAstUtils:
    """Utility helpers for tree-sitter-php nodes."""

    @staticmethod
    def get_node_text(node: Node, content: bytes, encoding: str = "utf-8") -> str:
        return content[node.start_byte : node.end_byte].decode(encoding, errors="ignore")

    @staticmethod
    def get_line(node: Node) -> int:
        return node.start_point[0] + 1

    @staticmethod
    def get_name(node: Node, content: bytes) -> str | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return PhpAstUtils.get_node_text(name_node, content)

    @staticmethod
    def namespace_name(definition: Node, content: bytes) -> str:
        """Name declared by a ``namespace_definition`` node ("" for the global namespace)."""
        name_node = definition.child_by_field_name("name")
        if name_node is None:
            return ""
        return "\\".join(
            PhpAstUtils.get_node_text(n, content)
            for n in name_node.named_children
            if n.type == "name"
        )

    @staticmethod
    def extract_namespace(root: Node, content: bytes) -> str:
        """First namespace declared in the file."""
        for child in root.named_children:
            if child.type == "namespace_definition":
                return PhpAstUtils.namespace_name(child, content)
        return ""

    @staticmethod
    def extract_use_map(root: Node, content: bytes) -> dict[str, str]:
        """Extract top-level `use ...` imports as {short_name: qualified_name}."""
        use_map: dict[str, str] = {}
        for child in root.named_children:
            if child.type == "namespace_use_declaration":
                use_map.update(PhpAstUtils.extract_use_clauses(child, content))
        return use_map

    @staticmethod
    def extract_use_clauses(declaration: Node, content: bytes) -> dict[str, str]:
        """Imports of one ``use`` declaration, expanding ``use A\\{B, C as D};`` groups."""
        use_map: dict[str, str] = {}
        prefix = ""
        for child in declaration.named_children:
            if child.type == "namespace_use_clause":
                PhpAstUtils._add_use_clause(child, content, "", use_map)
            elif child.type == "namespace_use_group":
                for clause in child.named_children:
                    if clause.type in ("namespace_use_clause", "namespace_use_group_clause"):
                        PhpAstUtils._add_use_clause(clause, content, prefix, use_map)
            elif child.type in NAME_NODES + ("namespace_name",):
                # Shared prefix of a group import
                prefix = PhpAstUtils.get_node_text(child, content).strip("\\")
        return use_map

    @staticmethod
    def _add_use_clause(clause: Node, content: bytes, prefix: str, use_map: dict[str, str]) -> None:
        names = [c for c in clause.named_children if c.type in NAME_NODES + ("namespace_name",)]
        if not names:
            return
        qualified = PhpAstUtils.get_node_text(names[0], content).strip("\\")
        if prefix:
            qualified = f"{prefix}\\{qualified}"

        alias_node = clause.child_by_field_name("alias")
        if alias_node is None:
            aliasing = next(
                (c for c in clause.named_children if c.type == "namespace_aliasing_clause"), None
            )
            if aliasing is not None:
                alias_node = next((c for c in aliasing.named_children if c.type == "name"), None)
        if alias_node is None and len(names) > 1:
            alias_node = names[1]

        short = (
            PhpAstUtils.get_node_text(alias_node, content)
            if alias_node is not None
            else qualified.rsplit("\\", 1)[-1]
        )
        use_map[short] = qualified

    @staticmethod
    def resolve_class_name(name: str, namespace: str, use_map: dict[str, str]) -> str:
        """Resolve a class reference to its fully qualified form."""
        if name.startswith("\\"):
            return name.lstrip("\\")
        if name.startswith("$") or name.lower() in ("self", "static", "parent"):
            return name
        head, _, rest = name.partition("\\")
        if head in use_map:
            return f"{use_map[head]}\\{rest}" if rest else use_map[head]
        return f"{namespace}\\{name}" if namespace else name

    @staticmethod
    def get_class_kind(node_type: str) -> ClassKind:
        mapping = {
            "class_declaration": ClassKind.CLASS,
            "interface_declaration": ClassKind.INTERFACE,
            "trait_declaration": ClassKind.TRAIT,
            "enum_declaration": ClassKind.ENUM,
        }
        return mapping.get(node_type, ClassKind.CLASS)

    @staticmethod
    def extract_modifiers(node: Node, content: bytes) -> list[str]:
        modifiers: list[str] = []
        for child in node.children:
            if child.type == "visibility_modifier":
                modifiers.append(PhpAstUtils.get_node_text(child, content).lower())
            elif child.type == "var_modifier":
                modifiers.append("public")
            elif child.type in (
                "static_modifier",
                "abstract_modifier",
                "final_modifier",
                "readonly_modifier",
            ):
                modifiers.append(child.type.replace("_modifier", ""))
        return modifiers

    @staticmethod
    def get_visibility(modifiers: list[str]) -> Visibility:
        if "private" in modifiers:
            return Visibility.PRIVATE
        if "protected" in modifiers:
            return Visibility.PROTECTED
        return Visibility.PUBLIC

    @staticmethod
    def get_doc_comment(node: Node, content: bytes) -> str | None:
        """Return the nearest preceding ``/** ... */`` block attached to ``node``."""
        sibling = node.prev_named_sibling
        while sibling is not None and sibling.type == "comment":
            text = PhpAstUtils.get_node_text(sibling, content)
            if text.startswith("/**"):
                return text
            sibling = sibling.prev_named_sibling
        return None

    @staticmethod
    def get_clause_names(clause: Node, content: bytes) -> list[str]:
        """Names listed in an extends/implements/use clause."""
        return [
            PhpAstUtils.get_node_text(child, content)
            for child in clause.named_children
            if child.type in NAME_NODES
        ]
