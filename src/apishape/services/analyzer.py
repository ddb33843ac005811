"""Unified analyzer service.

This module provides the CodeAnalyzer, which merges what the source, the
doc comments and the reflection host each know about a declaration into one
declaration graph per file or entity.

Per type-bearing field the first known value wins, in this order:

1. the type declared in source,
2. the type named by the doc comment,
3. the type reported by reflection.

A field none of them knows stays ``None``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, TypeVar, Union

from apishape.adapters.php.parser import SyntaxParser
from apishape.adapters.php.type_inferrer import TypeInferrer
from apishape.adapters.php.walker import (
    DeclarationWalker,
    FileContext,
    RawClass,
    RawFunction,
    RawParameter,
    RawProperty,
)
from apishape.core.config import AnalyzerConfig, get_config
from apishape.core.errors import AnalysisError, NotFoundError
from apishape.core.models import (
    ClassDeclaration,
    ConstantDeclaration,
    FileAnalysis,
    FunctionDeclaration,
    MethodDeclaration,
    ParameterDeclaration,
    ParseError,
    PropertyDeclaration,
)
from apishape.core.type_parser import parse_type_string
from apishape.core.types import Type
from apishape.docblock.models import DocBlock
from apishape.docblock.parser import DocBlockParser
from apishape.introspection.base import EntityIntrospector, NullIntrospector

if TYPE_CHECKING:
    from tree_sitter import Node

logger = logging.getLogger(__name__)

AnalysisResult = Union[ClassDeclaration, FileAnalysis]

T = TypeVar("T")


def _first(*candidates: T | None) -> T | None:
    return next((c for c in candidates if c is not None), None)


def _entity_key(name: str) -> str:
    return "entity:" + name.lstrip("\\").lower()


def _union_names(primary: list[str], secondary: list[str]) -> list[str]:
    seen = {name.lower() for name in primary}
    return primary + [name for name in secondary if name.lower() not in seen]


@dataclass
class BatchResult:
    """Result of analyzing several targets."""

    results: dict[str, AnalysisResult] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """Check if every target was analyzed."""
        return len(self.errors) == 0

    @property
    def files(self) -> list[FileAnalysis]:
        return [r for r in self.results.values() if isinstance(r, FileAnalysis)]


class CodeAnalyzer:
    """Analyzes PHP files and loaded entities into declaration graphs.

    Results are cached by file path or fully qualified entity name for the
    lifetime of the analyzer; call ``clear_cache()`` after sources change.
    An analyzer is not thread-safe: use one per worker.
    """

    def __init__(
        self,
        introspector: EntityIntrospector | None = None,
        config: AnalyzerConfig | None = None,
        parser: SyntaxParser | None = None,
        inferrer: TypeInferrer | None = None,
        docblock_parser: DocBlockParser | None = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            introspector: Reflection host; defaults to one with nothing loaded.
            config: Analyzer settings; defaults to ``get_config()``.
            parser: Syntax parser to share with collaborators.
            inferrer: Type inferrer to share with collaborators.
            docblock_parser: Doc-comment parser with any custom tag parsers.
        """
        self._config = config or get_config()
        self._introspector = introspector or NullIntrospector()
        self._parser = parser or SyntaxParser(self._config)
        self._inferrer = inferrer or TypeInferrer()
        self._docblocks = docblock_parser or DocBlockParser()
        self._walker = DeclarationWalker(self._parser, self._inferrer)
        self._cache: dict[str, AnalysisResult | FunctionDeclaration] = {}

    @property
    def introspector(self) -> EntityIntrospector:
        return self._introspector

    def supports(self, target: str | Path) -> bool:
        """Check whether ``target`` is an existing file or a loaded entity."""
        if Path(target).is_file():
            return True
        return isinstance(target, str) and self._introspector.is_loaded(target)

    def analyze(self, target: str | Path) -> AnalysisResult:
        """Analyze a file path or a loaded entity name.

        Args:
            target: Path to a PHP file, or a fully qualified class name.

        Returns:
            A FileAnalysis for files, a ClassDeclaration for entities.

        Raises:
            AnalysisError: If the target is neither, or analysis fails.
        """
        if Path(target).is_file():
            return self.analyze_file(target)
        if isinstance(target, str) and self._introspector.is_loaded(target):
            return self.analyze_entity(target)

        cause = NotFoundError(f"Target not found: {target}")
        raise AnalysisError.target_not_found(str(target), cause=cause) from cause

    def analyze_file(self, file_path: str | Path) -> FileAnalysis:
        """Analyze every declaration in a source file.

        Syntax errors are reported in ``FileAnalysis.errors``; the declarations
        tree-sitter could still recover are returned alongside them.

        Raises:
            AnalysisError: If the file is missing, unreadable or analysis fails.
        """
        path = Path(file_path)
        cache_key = "file:" + str(path.resolve())
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached  # type: ignore[return-value]

        try:
            syntax_tree, errors = self._parser.parse_file(path)
            walk = self._walker.walk(syntax_tree)
            analysis = self._build_file_analysis(
                path, walk.context.namespace, walk.classes, walk.functions, errors
            )
        except NotFoundError as e:
            raise AnalysisError.target_not_found(str(path), cause=e) from e
        except OSError as e:
            raise AnalysisError.ast_parsing_failed(str(path), str(e), cause=e) from e
        except Exception as e:
            raise AnalysisError.wrap(str(path), e) from e

        if analysis.has_errors:
            logger.info(f"{path}: {len(analysis.errors)} syntax error(s)")
        self._cache[cache_key] = analysis
        return analysis

    def analyze_entity(
        self, name: str, source_file: str | Path | None = None
    ) -> ClassDeclaration:
        """Analyze a class-like entity.

        Reflection data and the entity's source file are analyzed
        independently and merged. ``source_file`` lets callers analyze an
        entity the introspector does not know, or point at a different file.

        Raises:
            AnalysisError: If neither source nor reflection knows the entity.
        """
        cache_key = _entity_key(name)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached  # type: ignore[return-value]

        try:
            declaration = self._analyze_entity(name, source_file)
        except NotFoundError as e:
            raise AnalysisError.target_not_found(name, cause=e) from e
        except Exception as e:
            raise AnalysisError.wrap(name, e) from e

        self._cache[cache_key] = declaration
        return declaration

    def analyze_function(self, name: str) -> FunctionDeclaration:
        """Analyze a loaded free function from reflection and its doc comment.

        Raises:
            AnalysisError: If the function is not loaded.
        """
        cache_key = "function:" + name.lstrip("\\").lower()
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached  # type: ignore[return-value]

        try:
            reflected = self._introspector.introspect_function(name)
            function = self._build_function(None, reflected, None, reflected.file)
        except NotFoundError as e:
            raise AnalysisError.target_not_found(name, cause=e) from e
        except Exception as e:
            raise AnalysisError.wrap(name, e) from e

        self._cache[cache_key] = function
        return function

    def analyze_many(self, targets: Iterable[str | Path]) -> BatchResult:
        """Analyze several targets, collecting failures instead of raising."""
        batch = BatchResult()
        for target in targets:
            key = str(target)
            try:
                batch.results[key] = self.analyze(target)
            except AnalysisError as e:
                logger.warning(f"Skipping {key}: {e.message}")
                batch.errors[key] = e.message
        return batch

    def analyze_directory(self, directory: str | Path) -> BatchResult:
        """Analyze every file under ``directory`` matching the configured glob.

        Raises:
            AnalysisError: If ``directory`` is not a directory.
        """
        root = Path(directory)
        if not root.is_dir():
            cause = NotFoundError(f"Directory not found: {root}")
            raise AnalysisError.target_not_found(str(root), cause=cause) from cause

        files = sorted(p for p in root.rglob(self._config.file_glob) if p.is_file())
        logger.info(f"Analyzing {len(files)} file(s) under {root}")
        return self.analyze_many(files)

    def infer_type(self, node: Node) -> Type:
        return self._inferrer.infer_type(node)

    def parse_comment(self, doc_comment: str | None) -> DocBlock:
        return self._docblocks.parse(doc_comment)

    def clear_cache(self) -> None:
        """Drop cached results here and in every collaborator."""
        self._cache = {}
        self._introspector.clear_cache()
        self._inferrer.clear_cache()
        self._docblocks.clear_cache()
        self._parser.clear_errors()

    def _analyze_entity(self, name: str, source_file: str | Path | None) -> ClassDeclaration:
        reflected: ClassDeclaration | None = None
        if self._introspector.is_loaded(name):
            reflected = self._introspector.introspect_entity(name)

        path: Path | None = Path(source_file) if source_file is not None else None
        if path is None and reflected is not None and self._config.follow_source_for_entities:
            path = self._introspector.source_file(name)

        source: ClassDeclaration | None = None
        if path is not None and path.is_file():
            syntax_tree, _ = self._parser.parse_file(path)
            walk = self._walker.walk(syntax_tree)
            raw = walk.find_class(name)
            if raw is not None:
                source = self._build_class(raw, str(path), reflected)
            else:
                logger.debug(f"{name} not declared in {path}")

        if source is not None:
            return source
        if reflected is None:
            raise NotFoundError(f"Entity not found: {name}")
        return self._build_reflected_class(reflected)

    def _build_file_analysis(
        self,
        path: Path,
        namespace: str,
        classes: list[RawClass],
        functions: list[RawFunction],
        errors: list[ParseError],
    ) -> FileAnalysis:
        file = str(path)
        built_classes = {
            raw.name: self._build_class(raw, file, None) for raw in classes
        }
        built_functions = {
            raw.qualified_name: self._build_function(raw, None, raw.context, file)
            for raw in functions
        }

        return FileAnalysis(
            file=file,
            namespace=namespace,
            classes=built_classes,
            functions=built_functions,
            errors=errors,
        )

    def _build_class(
        self,
        raw: RawClass,
        file: str,
        reflected: ClassDeclaration | None,
    ) -> ClassDeclaration:
        context = raw.context
        keep_extra = reflected is not None and self._config.include_reflection_only_members

        # Method names are case-insensitive in PHP
        reflected_methods = (
            {name.lower(): method for name, method in reflected.methods.items()} if reflected else {}
        )
        methods: dict[str, MethodDeclaration] = {}
        for raw_method in raw.methods:
            methods[raw_method.name] = self._build_method(
                raw_method, reflected_methods.get(raw_method.name.lower()), context, raw.name, file
            )
        if keep_extra:
            declared = {name.lower() for name in methods}
            for key, reflected_method in reflected_methods.items():
                if key not in declared:
                    methods[reflected_method.name] = self._build_reflected_method(reflected_method)

        constructor = next((m for m in methods.values() if m.is_constructor), None)
        properties: dict[str, PropertyDeclaration] = {}
        for raw_property in raw.properties:
            reflected_property = reflected.properties.get(raw_property.name) if reflected else None
            properties[raw_property.name] = self._build_property(
                raw_property, reflected_property, context, constructor
            )
        if keep_extra:
            for name, reflected_property in reflected.properties.items():  # type: ignore[union-attr]
                if name not in properties:
                    properties[name] = self._build_reflected_property(reflected_property)

        constants = {
            c.name: ConstantDeclaration(
                name=c.name, visibility=c.visibility, type=c.value_type, value=c.value
            )
            for c in raw.constants
        }
        if keep_extra:
            for name, reflected_constant in reflected.constants.items():  # type: ignore[union-attr]
                constants.setdefault(name, reflected_constant)

        parent = raw.parent
        interfaces = list(raw.interfaces)
        traits = list(raw.traits)
        if reflected is not None:
            parent = parent or reflected.parent
            if self._config.include_reflection_only_members:
                interfaces = _union_names(interfaces, reflected.interfaces)
                traits = _union_names(traits, reflected.traits)

        return ClassDeclaration(
            name=raw.name,
            short_name=raw.short_name,
            namespace=raw.namespace,
            kind=raw.kind,
            modifiers=list(raw.modifiers),
            parent=parent,
            interfaces=interfaces,
            traits=traits,
            methods=methods,
            properties=properties,
            constants=constants,
            doc_comment=_first(raw.doc_comment, reflected.doc_comment if reflected else None),
            file=file,
            line=raw.line,
        )

    def _build_reflected_class(self, reflected: ClassDeclaration) -> ClassDeclaration:
        """Apply doc-comment types to a declaration known only through reflection."""
        methods = {
            name: self._build_reflected_method(method)
            for name, method in reflected.methods.items()
        }
        properties = {
            name: self._build_reflected_property(prop)
            for name, prop in reflected.properties.items()
        }
        return reflected.model_copy(update={"methods": methods, "properties": properties})

    def _build_method(
        self,
        raw: RawFunction,
        reflected: MethodDeclaration | None,
        context: FileContext | None,
        class_name: str,
        file: str | None,
    ) -> MethodDeclaration:
        return MethodDeclaration(
            **self._function_fields(raw, reflected, context, file),
            name=raw.name,
            class_name=class_name,
            visibility=raw.visibility,
            modifiers=list(raw.modifiers),
        )

    def _build_reflected_method(self, reflected: MethodDeclaration) -> MethodDeclaration:
        return MethodDeclaration(
            **self._function_fields(None, reflected, None, None),
            name=reflected.name,
            class_name=reflected.class_name,
            visibility=reflected.visibility,
            modifiers=list(reflected.modifiers),
        )

    def _build_function(
        self,
        raw: RawFunction | None,
        reflected: FunctionDeclaration | None,
        context: FileContext | None,
        file: str | None,
    ) -> FunctionDeclaration:
        name = raw.qualified_name if raw is not None else reflected.name  # type: ignore[union-attr]
        return FunctionDeclaration(name=name, **self._function_fields(raw, reflected, context, file))

    def _function_fields(
        self,
        raw: RawFunction | None,
        reflected: FunctionDeclaration | None,
        context: FileContext | None,
        file: str | None,
    ) -> dict:
        doc_comment = _first(
            raw.doc_comment if raw is not None else None,
            reflected.doc_comment if reflected is not None else None,
        )
        doc = self._docblocks.parse(doc_comment)

        if raw is not None:
            parameters = [
                self._build_parameter(
                    param,
                    reflected.get_parameter(param.name) if reflected is not None else None,
                    doc,
                    context,
                )
                for param in raw.parameters
            ]
        else:
            parameters = [
                self._build_reflected_parameter(param, doc)
                for param in (reflected.parameters if reflected is not None else [])
            ]

        return_tag = doc.first_tag("return")
        return_type = _first(
            raw.declared_return if raw is not None else None,
            self._doc_type(return_tag.type if return_tag else None, context),
            reflected.return_type if reflected is not None else None,
        )

        throws = [
            self._qualify_name(tag.type, context) for tag in doc.get_tags("throws") if tag.type
        ]

        return {
            "parameters": parameters,
            "return_type": return_type,
            "doc_comment": doc_comment,
            "throws": throws,
            "file": _first(file, reflected.file if reflected is not None else None),
            "line": _first(
                raw.line if raw is not None else None,
                reflected.line if reflected is not None else None,
            ),
        }

    def _build_parameter(
        self,
        raw: RawParameter,
        reflected: ParameterDeclaration | None,
        doc: DocBlock,
        context: FileContext | None,
    ) -> ParameterDeclaration:
        tag = doc.param_tag(raw.name)
        documented = self._doc_type(tag.type if tag is not None else None, context)
        description = tag.description if tag is not None else ""

        return ParameterDeclaration(
            name=raw.name,
            position=raw.position,
            type=_first(raw.declared_type, documented, reflected.type if reflected else None),
            optional=raw.optional,
            variadic=raw.variadic,
            by_reference=raw.by_reference,
            default_value=_first(
                raw.default_type, reflected.default_value if reflected else None
            ),
            description=description,
            promoted=raw.promoted,
        )

    def _build_reflected_parameter(
        self, reflected: ParameterDeclaration, doc: DocBlock
    ) -> ParameterDeclaration:
        tag = doc.param_tag(reflected.name)
        if tag is None:
            return reflected
        return reflected.model_copy(
            update={
                "type": _first(self._doc_type(tag.type, None), reflected.type),
                "description": tag.description,
            }
        )

    def _build_property(
        self,
        raw: RawProperty,
        reflected: PropertyDeclaration | None,
        context: FileContext | None,
        constructor: MethodDeclaration | None,
    ) -> PropertyDeclaration:
        var_tag = self._docblocks.parse(raw.doc_comment).first_tag("var")
        documented = self._doc_type(var_tag.type if var_tag else None, context)
        if documented is None and constructor is not None:
            # Promoted properties are documented by the constructor's @param tag
            promoted = constructor.get_parameter(raw.name)
            if promoted is not None and promoted.promoted is not None:
                documented = promoted.type

        return PropertyDeclaration(
            name=raw.name,
            visibility=raw.visibility,
            static=raw.static,
            readonly=raw.readonly,
            type=_first(raw.declared_type, documented, reflected.type if reflected else None),
            default_value=_first(raw.default_type, reflected.default_value if reflected else None),
            doc_comment=_first(raw.doc_comment, reflected.doc_comment if reflected else None),
        )

    def _build_reflected_property(self, reflected: PropertyDeclaration) -> PropertyDeclaration:
        var_tag = self._docblocks.parse(reflected.doc_comment).first_tag("var")
        documented = self._doc_type(var_tag.type if var_tag else None, None)
        return reflected.model_copy(update={"type": _first(documented, reflected.type)})

    def _doc_type(self, type_string: str | None, context: FileContext | None) -> Type | None:
        if not type_string:
            return None
        if context is None:
            return parse_type_string(type_string)
        return self._walker.resolve_type(type_string, context)

    @staticmethod
    def _qualify_name(name: str, context: FileContext | None) -> str:
        if context is None:
            return name.lstrip("\\")
        return context.qualify(name)
