"""Declaration walker for PHP syntax trees.

Collects class-like declarations, free functions, methods, properties,
constants and parameters as plain records carrying only what the source
syntax says: declared types, default-value types, modifiers and the raw doc
comment. Merging with doc-comment and reflection information is the
analyzer's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import BaseModel, Field
from tree_sitter import Node

from apishape.adapters.php.ast_utils import PhpAstUtils
from apishape.adapters.php.parser import SyntaxParser, SyntaxTree
from apishape.adapters.php.type_inferrer import TypeInferrer
from apishape.core.models import ClassKind, Visibility
from apishape.core.type_parser import parse_type_string, qualify_type_names
from apishape.core.types import NamedType, Type

logger = logging.getLogger(__name__)

PARAMETER_NODES = ("simple_parameter", "variadic_parameter", "property_promotion_parameter")


class FileContext(BaseModel):
    """File-level context for name resolution."""

    namespace: str = Field("", description="Current namespace (backslash separated)")
    use_map: dict[str, str] = Field(
        default_factory=dict, description="Imported aliases (short -> qualified)"
    )

    def qualify(self, name: str) -> str:
        return PhpAstUtils.resolve_class_name(name, self.namespace, self.use_map)


@dataclass
class RawParameter:
    name: str
    position: int
    declared_type: Type | None = None
    default_type: Type | None = None
    optional: bool = False
    variadic: bool = False
    by_reference: bool = False
    promoted: Visibility | None = None
    promoted_readonly: bool = False


@dataclass
class RawFunction:
    name: str
    qualified_name: str
    parameters: list[RawParameter] = field(default_factory=list)
    declared_return: Type | None = None
    doc_comment: str | None = None
    line: int | None = None
    visibility: Visibility = Visibility.PUBLIC
    modifiers: list[str] = field(default_factory=list)
    context: FileContext = field(default_factory=FileContext)


@dataclass
class RawProperty:
    name: str
    visibility: Visibility = Visibility.PUBLIC
    static: bool = False
    readonly: bool = False
    declared_type: Type | None = None
    default_type: Type | None = None
    doc_comment: str | None = None


@dataclass
class RawConstant:
    name: str
    visibility: Visibility = Visibility.PUBLIC
    value_type: Type | None = None
    value: str | None = None


@dataclass
class RawClass:
    name: str
    short_name: str
    namespace: str
    kind: ClassKind
    modifiers: list[str] = field(default_factory=list)
    parent: str | None = None
    interfaces: list[str] = field(default_factory=list)
    traits: list[str] = field(default_factory=list)
    methods: list[RawFunction] = field(default_factory=list)
    properties: list[RawProperty] = field(default_factory=list)
    constants: list[RawConstant] = field(default_factory=list)
    doc_comment: str | None = None
    line: int | None = None
    context: FileContext = field(default_factory=FileContext)


@dataclass
class WalkResult:
    context: FileContext
    classes: list[RawClass] = field(default_factory=list)
    functions: list[RawFunction] = field(default_factory=list)

    def find_class(self, name: str) -> RawClass | None:
        wanted = name.lstrip("\\").lower()
        return next((c for c in self.classes if c.name.lower() == wanted), None)


class DeclarationWalker:
    """Walks a parsed PHP file and collects raw declarations."""

    def __init__(self, parser: SyntaxParser, inferrer: TypeInferrer) -> None:
        self._parser = parser
        self._inferrer = inferrer

    def walk(self, syntax_tree: SyntaxTree) -> WalkResult:
        root = syntax_tree.root
        content = syntax_tree.content
        context = FileContext(
            namespace=PhpAstUtils.extract_namespace(root, content),
            use_map=PhpAstUtils.extract_use_map(root, content),
        )
        result = WalkResult(context=context)

        for class_node in self._parser.find_classes(root):
            raw_class = self._walk_class(class_node, content)
            if raw_class is not None:
                result.classes.append(raw_class)

        for function_node in self._parser.find_functions(root):
            raw_function = self._walk_function(
                function_node, content, self._context_for(function_node, content)
            )
            if raw_function is not None:
                result.functions.append(raw_function)

        logger.debug(
            f"Walked {len(result.classes)} class(es) and {len(result.functions)} function(s)"
        )
        return result

    @staticmethod
    def resolve_type(type_string: str | None, context: FileContext) -> Type | None:
        """Parse a type expression with class names resolved against the file's namespace and imports."""
        if not type_string:
            return None
        return parse_type_string(qualify_type_names(type_string, context.qualify))

    def _declared_type(self, node: Node | None, content: bytes, context: FileContext) -> Type | None:
        if node is None:
            return None
        return self.resolve_type(PhpAstUtils.get_node_text(node, content), context)

    def _walk_class(self, node: Node, content: bytes) -> RawClass | None:
        short_name = PhpAstUtils.get_name(node, content)
        if short_name is None:
            return None

        class_context = self._context_for(node, content)
        namespace = class_context.namespace
        qualified_name = f"{namespace}\\{short_name}" if namespace else short_name
        kind = PhpAstUtils.get_class_kind(node.type)

        modifiers = [
            m for m in PhpAstUtils.extract_modifiers(node, content) if m in ("abstract", "final", "readonly")
        ]
        if kind != ClassKind.CLASS:
            modifiers.append(kind.value)

        raw_class = RawClass(
            name=qualified_name,
            short_name=short_name,
            namespace=namespace,
            kind=kind,
            modifiers=modifiers,
            doc_comment=PhpAstUtils.get_doc_comment(node, content),
            line=PhpAstUtils.get_line(node),
            context=class_context,
        )

        for child in node.named_children:
            if child.type == "base_clause":
                bases = [class_context.qualify(n) for n in PhpAstUtils.get_clause_names(child, content)]
                if kind == ClassKind.INTERFACE:
                    raw_class.interfaces.extend(bases)
                elif bases:
                    raw_class.parent = bases[0]
            elif child.type == "class_interface_clause":
                raw_class.interfaces.extend(
                    class_context.qualify(n) for n in PhpAstUtils.get_clause_names(child, content)
                )

        body = node.child_by_field_name("body")
        if body is not None:
            self._walk_class_body(body, content, class_context, raw_class)

        return raw_class

    def _walk_class_body(
        self, body: Node, content: bytes, context: FileContext, raw_class: RawClass
    ) -> None:
        for member in body.named_children:
            if member.type == "method_declaration":
                method = self._walk_function(member, content, context, owner=raw_class.name)
                if method is None:
                    continue
                raw_class.methods.append(method)
                raw_class.properties.extend(self._promoted_properties(method))
            elif member.type == "property_declaration":
                raw_class.properties.extend(self._walk_property(member, content, context))
            elif member.type == "const_declaration":
                raw_class.constants.extend(self._walk_constants(member, content))
            elif member.type == "enum_case":
                case = self._walk_enum_case(member, content, raw_class.name)
                if case is not None:
                    raw_class.constants.append(case)
            elif member.type == "use_declaration":
                raw_class.traits.extend(
                    context.qualify(n) for n in PhpAstUtils.get_clause_names(member, content)
                )

    def _walk_function(
        self,
        node: Node,
        content: bytes,
        context: FileContext,
        owner: str | None = None,
    ) -> RawFunction | None:
        name = PhpAstUtils.get_name(node, content)
        if name is None:
            return None

        if owner is not None:
            qualified_name = f"{owner}::{name}"
        else:
            namespace = context.namespace
            qualified_name = f"{namespace}\\{name}" if namespace else name

        modifiers = PhpAstUtils.extract_modifiers(node, content)
        parameters: list[RawParameter] = []
        params_node = node.child_by_field_name("parameters")
        if params_node is not None:
            position = 0
            for param_node in params_node.named_children:
                if param_node.type not in PARAMETER_NODES:
                    continue
                parameter = self._walk_parameter(param_node, position, content, context)
                if parameter is not None:
                    parameters.append(parameter)
                    position += 1

        return RawFunction(
            name=name,
            qualified_name=qualified_name,
            parameters=parameters,
            declared_return=self._declared_type(
                node.child_by_field_name("return_type"), content, context
            ),
            doc_comment=PhpAstUtils.get_doc_comment(node, content),
            line=PhpAstUtils.get_line(node),
            visibility=PhpAstUtils.get_visibility(modifiers),
            modifiers=[m for m in modifiers if m in ("static", "abstract", "final")],
            context=context,
        )

    def _walk_parameter(
        self, node: Node, position: int, content: bytes, context: FileContext
    ) -> RawParameter | None:
        name_node = node.child_by_field_name("name")
        by_reference = node.child_by_field_name("reference_modifier") is not None or any(
            child.type in ("reference_modifier", "&") for child in node.children
        )
        if name_node is not None and name_node.type == "by_ref":
            by_reference = True
            name_node = next((c for c in name_node.named_children if c.type == "variable_name"), None)
        if name_node is None:
            name_node = next((c for c in node.named_children if c.type == "variable_name"), None)
        if name_node is None:
            return None

        default_node = node.child_by_field_name("default_value")
        variadic = node.type == "variadic_parameter"

        promoted: Visibility | None = None
        promoted_readonly = False
        if node.type == "property_promotion_parameter":
            modifiers = PhpAstUtils.extract_modifiers(node, content)
            promoted = PhpAstUtils.get_visibility(modifiers)
            promoted_readonly = "readonly" in modifiers

        return RawParameter(
            name=PhpAstUtils.get_node_text(name_node, content).lstrip("$"),
            position=position,
            declared_type=self._declared_type(node.child_by_field_name("type"), content, context),
            default_type=self._inferrer.infer_type(default_node) if default_node is not None else None,
            optional=default_node is not None or variadic,
            variadic=variadic,
            by_reference=by_reference,
            promoted=promoted,
            promoted_readonly=promoted_readonly,
        )

    @staticmethod
    def _promoted_properties(method: RawFunction) -> list[RawProperty]:
        if method.name.lower() != "__construct":
            return []
        return [
            RawProperty(
                name=param.name,
                visibility=param.promoted,
                readonly=param.promoted_readonly,
                declared_type=param.declared_type,
                default_type=param.default_type,
            )
            for param in method.parameters
            if param.promoted is not None
        ]

    def _walk_property(self, node: Node, content: bytes, context: FileContext) -> list[RawProperty]:
        modifiers = PhpAstUtils.extract_modifiers(node, content)
        declared_type = self._declared_type(node.child_by_field_name("type"), content, context)
        doc_comment = PhpAstUtils.get_doc_comment(node, content)

        properties: list[RawProperty] = []
        for element in node.named_children:
            if element.type != "property_element":
                continue
            name_node = element.child_by_field_name("name") or next(
                (c for c in element.named_children if c.type == "variable_name"), None
            )
            if name_node is None:
                continue
            default_node = element.child_by_field_name("default_value")
            if default_node is None:
                initializer = next(
                    (c for c in element.named_children if c.type == "property_initializer"), None
                )
                if initializer is not None and initializer.named_child_count > 0:
                    default_node = initializer.named_children[0]
            properties.append(
                RawProperty(
                    name=PhpAstUtils.get_node_text(name_node, content).lstrip("$"),
                    visibility=PhpAstUtils.get_visibility(modifiers),
                    static="static" in modifiers,
                    readonly="readonly" in modifiers,
                    declared_type=declared_type,
                    default_type=(
                        self._inferrer.infer_type(default_node) if default_node is not None else None
                    ),
                    doc_comment=doc_comment,
                )
            )
        return properties

    def _walk_constants(self, node: Node, content: bytes) -> list[RawConstant]:
        visibility = PhpAstUtils.get_visibility(PhpAstUtils.extract_modifiers(node, content))
        constants: list[RawConstant] = []
        for element in node.named_children:
            if element.type != "const_element":
                continue
            parts = [c for c in element.named_children if c.type != "comment"]
            if len(parts) < 2:
                continue
            value_node = element.child_by_field_name("value") or parts[-1]
            constants.append(
                RawConstant(
                    name=PhpAstUtils.get_node_text(parts[0], content),
                    visibility=visibility,
                    value_type=self._inferrer.infer_type(value_node),
                    value=PhpAstUtils.get_node_text(value_node, content),
                )
            )
        return constants

    def _walk_enum_case(self, node: Node, content: bytes, enum_name: str) -> RawConstant | None:
        name = PhpAstUtils.get_name(node, content)
        if name is None:
            return None
        value_node = node.child_by_field_name("value")
        if value_node is None:
            # Pure enum case: the case is an instance of the enum itself
            return RawConstant(name=name, value_type=NamedType(type_name=enum_name))
        return RawConstant(
            name=name,
            value_type=self._inferrer.infer_type(value_node),
            value=PhpAstUtils.get_node_text(value_node, content),
        )

    @staticmethod
    def _context_for(node: Node, content: bytes) -> FileContext:
        """Namespace and imports in effect where ``node`` is declared.

        A braced ``namespace X { }`` block scopes its own imports. Otherwise the
        last unbraced ``namespace X;`` before the declaration applies, together
        with the ``use`` statements between it and the declaration.
        """
        statement = node
        scope = node.parent
        while scope is not None and scope.type != "program":
            if scope.type == "compound_statement" and scope.parent is not None:
                if scope.parent.type == "namespace_definition":
                    break
            statement, scope = scope, scope.parent
        if scope is None:
            return FileContext()

        namespace = ""
        if scope.type == "compound_statement":
            namespace = PhpAstUtils.namespace_name(scope.parent, content)
        use_map: dict[str, str] = {}
        for sibling in scope.named_children:
            if sibling.start_byte >= statement.start_byte:
                break
            if sibling.type == "namespace_definition" and sibling.child_by_field_name("body") is None:
                namespace = PhpAstUtils.namespace_name(sibling, content)
                use_map = {}
            elif sibling.type == "namespace_use_declaration":
                use_map.update(PhpAstUtils.extract_use_clauses(sibling, content))
        return FileContext(namespace=namespace, use_map=use_map)
