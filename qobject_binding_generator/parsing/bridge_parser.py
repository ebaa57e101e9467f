#!/usr/bin/env python3
"""
Structuring layer: turn a parsed `#[cxx_qt::bridge]` module into a BridgeModule.

Responsibilities:
- Locate the bridge module and read its options (namespace, cxx_file_stem)
- Build the NameMappings table from `extern "C++"` type declarations and the
  dependency mappings
- Build one ObjectDescription per `#[cxx_qt::qobject]` struct, extracting
  `#[qproperty]` fields
- Attach signals and inherited methods from `extern "RustQt"` blocks,
  invokables from `impl qobject::X` blocks, and policies/constructors from
  `cxx_qt::Threading`, `cxx_qt::Locking` and `cxx_qt::Constructor` impls
- Sort every other item into the bridge or the implementation module

Errors are fail-fast per item and collected across items; a pass with errors
raises one GeneratorErrorGroup (or the single error).
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Set, Tuple
import logging

from .. import syntax
from ..cfg import CfgResolver, UnsupportedCfgResolver, evaluate_attributes
from ..errors import ErrorCollector, StructuringError
from ..models import (
    BridgeModule,
    Constructor,
    ConstructorRouting,
    InheritedMethod,
    Invokable,
    InvokableSpecifier,
    NameMappings,
    ObjectDescription,
    Parameter,
    Property,
    PropertyFlags,
    QmlElementMetadata,
    Signal,
)
from ..naming import (
    check_collisions,
    inherited_method_names,
    invokable_names,
    property_names,
    qobject_names,
    signal_names,
)
from ..type_mapping import TypeMapper
from .attributes import (
    FLAG,
    STRING,
    find_attribute,
    parse_options,
    select_kind,
    string_attribute,
    strip_attributes,
    take_attribute,
)

logger = logging.getLogger(__name__)

BRIDGE_ATTRIBUTE = "cxx_qt::bridge"
QOBJECT_ATTRIBUTE = "cxx_qt::qobject"
QPROPERTY_ATTRIBUTES = ("qproperty", "cxx_qt::qproperty")
QINVOKABLE_ATTRIBUTES = ("qinvokable", "cxx_qt::qinvokable")
NAME_ATTRIBUTES = ("cxx_name", "rust_name")

BRIDGE_OPTIONS = {"namespace": STRING, "cxx_file_stem": STRING}
QOBJECT_OPTIONS = {
    "base": STRING,
    "namespace": STRING,
    "qml_uri": STRING,
    "qml_version": STRING,
    "qml_name": STRING,
    "qml_uncreatable": FLAG,
    "qml_singleton": FLAG,
}
QPROPERTY_OPTIONS = {
    "cxx_type": STRING,
    "cxx_name": STRING,
    "read_only": FLAG,
    "constant": FLAG,
    "no_notify": FLAG,
    "required": FLAG,
    "final": FLAG,
}
QINVOKABLE_OPTIONS = {"cxx_final": FLAG, "cxx_override": FLAG, "cxx_virtual": FLAG}

CONSTRUCTOR_GROUPS = ("NewArguments", "BaseArguments", "InitializeArguments")

UNSUPPORTED_TRAIT_MESSAGE = (
    "Unsupported trait!\n"
    "CXX-Qt currently only supports:\n"
    "- cxx_qt::Threading\n"
    "- cxx_qt::Constructor\n"
    "- cxx_qt::Locking\n"
    "Note that the trait must always be fully-qualified."
)


# --------------------------
# Constructor routing
# --------------------------

def route_constructor_arguments(
    arguments: Sequence[str],
    base: Sequence[str],
    new: Sequence[str],
    initialize: Sequence[str],
) -> Optional[ConstructorRouting]:
    """
    Partition the declared argument tuple into the three groups.

    Each group must be an order-preserving subsequence of `arguments` and every
    argument must be used exactly once. Types are compared as rendered source.
    The search is depth-first and tries base, then new, then initialize for each
    argument, so the result is deterministic. Returns None when no partition
    exists.
    """
    groups = (list(base), list(new), list(initialize))
    if sum(len(g) for g in groups) != len(arguments):
        return None

    assigned: Tuple[List[int], List[int], List[int]] = ([], [], [])

    def visit(index: int) -> bool:
        if index == len(arguments):
            return True
        for g, group in enumerate(groups):
            position = len(assigned[g])
            if position < len(group) and group[position] == arguments[index]:
                assigned[g].append(index)
                if visit(index + 1):
                    return True
                assigned[g].pop()
        return False

    if not visit(0):
        return None
    return ConstructorRouting(base=tuple(assigned[0]), new=tuple(assigned[1]), initialize=tuple(assigned[2]))


def _tuple_elems(ty: syntax.Type, message: str) -> List[syntax.Type]:
    if not isinstance(ty, syntax.TypeTuple):
        raise StructuringError(message, ty.span)
    return list(ty.elems)


# --------------------------
# Parser
# --------------------------

class BridgeParser:
    """
    Structure one bridge module. A parser instance is cheap; create one per file.
    """

    def __init__(
        self,
        resolver: Optional[CfgResolver] = None,
        dependency_mappings: Optional[NameMappings] = None,
    ) -> None:
        self.resolver = resolver if resolver is not None else UnsupportedCfgResolver()
        self.dependency_mappings = dependency_mappings if dependency_mappings is not None else NameMappings()
        self._objects: Dict[str, ObjectDescription] = {}
        self._disabled_objects: Set[str] = set()

    # ---- entry point

    def parse(self, file: syntax.File) -> BridgeModule:
        module, bridge_attr = self._find_bridge(file)
        options = parse_options(bridge_attr.meta, BRIDGE_OPTIONS)
        namespace = str(options.get("namespace", ""))
        if module.items is None:
            raise StructuringError("#[cxx_qt::bridge] modules must have a body", module.span)

        result = BridgeModule(
            ident=module.ident,
            namespace=namespace,
            cxx_file_stem=str(options.get("cxx_file_stem", module.ident)),
            attrs=strip_attributes(module.attrs, BRIDGE_ATTRIBUTE),
            span=module.span,
        )
        result.mappings = NameMappings(self.dependency_mappings.to_dict())
        errors = ErrorCollector()

        for item in module.items:
            if isinstance(item, syntax.ItemForeignMod) and item.abi == "C++":
                with errors.collect():
                    self._collect_foreign_types(item, namespace, result)

        mapper = TypeMapper(result.mappings)

        for item in module.items:
            if isinstance(item, syntax.ItemStruct) and find_attribute(item.attrs, QOBJECT_ATTRIBUTE):
                with errors.collect():
                    self._parse_qobject(item, namespace, mapper, result)

        for item in module.items:
            with errors.collect():
                self._route_item(item, mapper, result, errors)

        for obj in result.objects:
            for index, constructor in enumerate(obj.constructors):
                constructor.index = index
            with errors.collect():
                check_collisions(obj)

        errors.raise_if_any()
        for obj in result.objects:
            logger.debug(
                "QObject %s: %d properties, %d signals, %d invokables, %d inherited, %d constructors",
                obj.ident,
                len(obj.properties),
                len(obj.signals),
                len(obj.invokables),
                len(obj.inherited_methods),
                len(obj.constructors),
            )
        logger.info("Structured bridge `%s` with %d QObject(s)", result.ident, len(result.objects))
        return result

    # ---- helpers

    def _enabled(self, attrs: Sequence[syntax.Attribute], span: syntax.Span) -> bool:
        return evaluate_attributes(self.resolver, attrs, span)

    @staticmethod
    def _find_bridge(file: syntax.File) -> Tuple[syntax.ItemMod, syntax.Attribute]:
        found: List[Tuple[syntax.ItemMod, syntax.Attribute]] = []
        for item in file.items:
            if isinstance(item, syntax.ItemMod):
                attr = find_attribute(item.attrs, BRIDGE_ATTRIBUTE)
                if attr is not None:
                    found.append((item, attr))
        if not found:
            raise StructuringError("No module marked with #[cxx_qt::bridge] was found")
        if len(found) > 1:
            raise StructuringError("Only one #[cxx_qt::bridge] module is supported per file", found[1][0].span)
        return found[0]

    def _object_for(self, ty: Optional[syntax.Type]) -> Optional[ObjectDescription]:
        """
        Resolve `qobject::X`, `X` or `cxx_qt::QObject<X>` to a known object.
        Raises for unknown qobject paths; returns None for disabled objects.
        """
        ident = self._object_ident(ty)
        if ident is None:
            return None
        obj = self._objects.get(ident)
        if obj is None and ident not in self._disabled_objects:
            raise StructuringError(f"Could not find a qobject named `{ident}`", ty.span if ty is not None else syntax.UNKNOWN_SPAN)
        return obj

    def _object_ident(self, ty: Optional[syntax.Type]) -> Optional[str]:
        if not isinstance(ty, syntax.TypePath):
            return None
        idents = ty.idents
        if len(idents) == 2 and idents[0] == "qobject" and ty.last.arguments is None:
            return idents[1]
        if idents == ["cxx_qt", "QObject"] and ty.last.arguments is not None:
            args = ty.last.arguments.args
            if len(args) == 1 and isinstance(args[0], syntax.TypePath) and len(args[0].segments) == 1:
                return args[0].segments[0].ident
        if len(idents) == 1 and ty.last.arguments is None and (idents[0] in self._objects or idents[0] in self._disabled_objects):
            return idents[0]
        return None

    # ---- foreign types

    def _collect_foreign_types(self, block: syntax.ItemForeignMod, namespace: str, result: BridgeModule) -> None:
        block_namespace = string_attribute(block.attrs, "namespace")
        for fitem in block.items:
            if fitem.kind != "type" or fitem.ident is None:
                continue
            cxx_name = string_attribute(fitem.attrs, "cxx_name")
            item_namespace = string_attribute(fitem.attrs, "namespace")
            explicit = cxx_name is not None or item_namespace is not None or block_namespace is not None
            ns = item_namespace if item_namespace is not None else (block_namespace if block_namespace is not None else namespace)
            name = cxx_name or fitem.ident
            qualified = f"::{ns}::{name}" if ns else f"::{name}"

            if fitem.alias is not None:
                mapped = None
                if isinstance(fitem.alias, syntax.TypePath):
                    mapped = self.dependency_mappings.get(fitem.alias.plain.lstrip(":"))
                if mapped is None and explicit:
                    mapped = qualified
                if mapped is not None and mapped != fitem.ident:
                    result.mappings.insert(fitem.ident, mapped)
                continue

            if qualified != fitem.ident:
                result.mappings.insert(fitem.ident, qualified)
            result.exported_mappings.insert(fitem.ident, qualified)

    # ---- qobjects

    def _parse_qobject(self, struct: syntax.ItemStruct, namespace: str, mapper: TypeMapper, result: BridgeModule) -> None:
        attr = find_attribute(struct.attrs, QOBJECT_ATTRIBUTE)
        select_kind(struct.attrs, ("qobject",), struct.span, "struct")
        enabled = self._enabled(struct.attrs, struct.span)
        struct.attrs = strip_attributes(struct.attrs, QOBJECT_ATTRIBUTE)
        if not enabled:
            logger.debug("Skipping QObject %s disabled by cfg", struct.ident)
            self._disabled_objects.add(struct.ident)
            for fld in struct.fields:
                fld.attrs = strip_attributes(fld.attrs, *QPROPERTY_ATTRIBUTES)
            return

        options = parse_options(attr.meta, QOBJECT_OPTIONS)
        qml = self._parse_qml_metadata(struct, attr, options)
        if struct.style == "tuple":
            raise StructuringError("qobject marked structs must have named fields", struct.span)
        if not struct.is_public:
            raise StructuringError("qobject marked structs must be public", struct.span)

        obj_namespace = str(options.get("namespace", "")) or namespace
        names = qobject_names(struct.ident, obj_namespace)
        obj = ObjectDescription(
            ident=struct.ident,
            names=names,
            struct=struct,
            base_class=str(options.get("base", "")) or "QObject",
            qml=qml,
            span=struct.span,
        )

        errors = ErrorCollector()
        for fld in struct.fields:
            with errors.collect():
                prop = self._parse_property(fld, mapper)
                if prop is not None:
                    obj.properties.append(prop)
        errors.raise_if_any()

        if struct.ident in self._objects:
            raise StructuringError(f"Duplicate qobject `{struct.ident}`", struct.span)
        self._objects[struct.ident] = obj
        result.objects.append(obj)
        result.mappings.insert(f"qobject::{struct.ident}", names.qualified_cpp_class)
        result.exported_mappings.insert(f"qobject::{struct.ident}", names.qualified_cpp_class)

    @staticmethod
    def _parse_qml_metadata(
        struct: syntax.ItemStruct,
        attr: syntax.Attribute,
        options: Dict[str, object],
    ) -> Optional[QmlElementMetadata]:
        uri = options.get("qml_uri")
        version = options.get("qml_version")
        if uri is not None and version is None:
            raise StructuringError("qml_uri specified but no qml_version specified", attr.span)
        if version is not None and uri is None:
            raise StructuringError("qml_version specified but no qml_uri specified", attr.span)
        if uri is None:
            for key in ("qml_name", "qml_uncreatable", "qml_singleton"):
                if key in options:
                    raise StructuringError(f"{key} specified but qml_uri and qml_version unspecified", attr.span)
            return None

        parts = str(version).split(".")
        try:
            major = int(parts[0])
        except ValueError:
            raise StructuringError("Could not parse major version from qml_version", attr.span) from None
        try:
            minor = int(parts[1]) if len(parts) > 1 else 0
        except ValueError:
            minor = 0
        return QmlElementMetadata(
            uri=str(uri),
            name=str(options.get("qml_name") or struct.ident),
            version_major=major,
            version_minor=minor,
            uncreatable=bool(options.get("qml_uncreatable")),
            singleton=bool(options.get("qml_singleton")),
        )

    def _parse_property(self, fld: syntax.Field, mapper: TypeMapper) -> Optional[Property]:
        kind = select_kind(fld.attrs, ("qproperty",), fld.span, "field")
        if kind is None:
            return None
        attr = take_attribute(fld.attrs, *QPROPERTY_ATTRIBUTES)
        if not self._enabled(fld.attrs, fld.span):
            return None
        options = parse_options(attr.meta, QPROPERTY_OPTIONS)
        flags = PropertyFlags(
            read_only=bool(options.get("read_only")),
            constant=bool(options.get("constant")),
            no_notify=bool(options.get("no_notify")),
            required=bool(options.get("required")),
            final=bool(options.get("final")),
        )
        override = options.get("cxx_type")
        return Property(
            ident=fld.ident,
            ty=fld.ty,
            descriptor=mapper.descriptor(fld.ty, str(override) if override is not None else None),
            names=property_names(fld.ident, options.get("cxx_name")),
            flags=flags,
            span=fld.span,
        )

    # ---- item routing

    def _route_item(self, item: syntax.Item, mapper: TypeMapper, result: BridgeModule, errors: ErrorCollector) -> None:
        if isinstance(item, syntax.ItemStruct):
            if item.ident in self._objects or item.ident in self._disabled_objects:
                result.implementation_items.append(item)
            else:
                result.bridge_items.append(item)
            return
        if isinstance(item, syntax.ItemForeignMod):
            if item.abi == "RustQt":
                for fitem in item.items:
                    with errors.collect():
                        self._parse_rustqt_item(item, fitem, mapper)
            else:
                result.bridge_items.append(item)
            return
        if isinstance(item, syntax.ItemImpl):
            self._route_impl(item, mapper, result, errors)
            return
        if isinstance(item, syntax.ItemVerbatim) and item.kind == "enum":
            result.bridge_items.append(item)
            return
        result.implementation_items.append(item)

    def _route_impl(self, impl: syntax.ItemImpl, mapper: TypeMapper, result: BridgeModule, errors: ErrorCollector) -> None:
        trait = impl.trait_path
        if trait is not None:
            obj = self._parse_trait_impl(impl, mapper)
            if obj is not None and trait == "cxx_qt::Constructor":
                result.implementation_items.append(impl)
            return
        if trait is None and self._object_ident(impl.self_ty) is not None:
            obj = self._object_for(impl.self_ty)
            if obj is None:
                logger.debug("Skipping impl of disabled QObject %s", impl.self_ty.to_rust())
                return
            if self._enabled(impl.attrs, impl.span):
                impl = self._parse_qobject_impl(impl, obj, mapper, errors)
        result.implementation_items.append(impl)

    # ---- extern "RustQt"

    def _parse_rustqt_item(self, block: syntax.ItemForeignMod, fitem: syntax.ForeignItem, mapper: TypeMapper) -> None:
        if fitem.kind != "fn" or fitem.sig is None:
            raise StructuringError('Only functions are supported in extern "RustQt" blocks', fitem.span)
        kind = select_kind(fitem.attrs, ("qsignal", "inherit"), fitem.span, "function")
        if kind is None:
            raise StructuringError(
                'Functions in extern "RustQt" blocks must be marked with #[qsignal] or #[inherit]',
                fitem.span,
            )
        if not self._enabled(fitem.attrs, fitem.span):
            return
        sig = fitem.sig
        inherit = find_attribute(fitem.attrs, "inherit", "cxx_qt::inherit") is not None
        label = "Signals" if kind == "qsignal" else "Inherited methods"
        if not block.unsafe and not sig.unsafe:
            raise StructuringError(
                f'{label} must be marked as unsafe or wrapped in an unsafe extern "RustQt" block!',
                fitem.span,
            )
        safe = block.unsafe and not sig.unsafe

        receiver = sig.receiver
        if receiver is None or receiver.self_path is None:
            raise StructuringError(
                f"{label} must have a `self: Pin<&mut qobject::T>` or `self: &qobject::T` receiver",
                fitem.span,
            )
        obj = self._object_for(receiver.self_path)
        if obj is None:
            if self._object_ident(receiver.self_path) is None:
                raise StructuringError(
                    f"Could not find a qobject named `{receiver.self_path.to_rust()}`",
                    receiver.span,
                )
            return

        cxx_name = string_attribute(fitem.attrs, "cxx_name")
        rust_name = string_attribute(fitem.attrs, "rust_name")
        parameters = self._parameters(sig, mapper)
        if kind == "qsignal":
            if sig.output is not None and not (isinstance(sig.output, syntax.TypeTuple) and sig.output.is_unit):
                raise StructuringError("Signals cannot have a return type", sig.output.span)
            obj.signals.append(
                Signal(
                    ident=sig.ident,
                    parameters=parameters,
                    names=signal_names(sig.ident, obj.names, cxx_name, rust_name),
                    mutable=receiver.is_mutable,
                    safe=safe,
                    inherit=inherit,
                    docs=[a for a in fitem.attrs if a.path == "doc"],
                    span=fitem.span,
                )
            )
        else:
            obj.inherited_methods.append(
                InheritedMethod(
                    ident=sig.ident,
                    parameters=parameters,
                    names=inherited_method_names(sig.ident, cxx_name, rust_name),
                    return_type=sig.output,
                    return_descriptor=mapper.return_descriptor(sig.output),
                    mutable=receiver.is_mutable,
                    safe=safe,
                    span=fitem.span,
                )
            )

    @staticmethod
    def _parameters(sig: syntax.Signature, mapper: TypeMapper) -> List[Parameter]:
        return [
            Parameter(ident=arg.ident, ty=arg.ty, descriptor=mapper.descriptor(arg.ty), span=arg.span)
            for arg in sig.typed_args
        ]

    # ---- impl qobject::X

    def _parse_qobject_impl(
        self,
        impl: syntax.ItemImpl,
        obj: ObjectDescription,
        mapper: TypeMapper,
        errors: ErrorCollector,
    ) -> syntax.ItemImpl:
        """
        Extract invokables and return a copy of the impl with bridge attributes stripped.
        """
        members: List[syntax.ImplItem] = []
        for member in impl.items:
            with errors.collect():
                kind = select_kind(member.attrs, ("qinvokable",), member.span, "impl item")
                if kind == "qinvokable" and member.kind == "fn":
                    if self._enabled(member.attrs, member.span):
                        obj.invokables.append(self._parse_invokable(member, mapper))
                    member = replace(member, attrs=strip_attributes(member.attrs, *QINVOKABLE_ATTRIBUTES, *NAME_ATTRIBUTES))
                else:
                    obj.passthrough_items.append(member)
            members.append(member)
        return replace(impl, items=members)

    @staticmethod
    def _parse_invokable(member: syntax.ImplItem, mapper: TypeMapper) -> Invokable:
        sig = member.sig
        attr = find_attribute(member.attrs, *QINVOKABLE_ATTRIBUTES)
        options = parse_options(attr.meta, QINVOKABLE_OPTIONS)
        receiver = sig.receiver
        if receiver is None:
            raise StructuringError("Invokables must have a self receiver", sig.span)
        if receiver.ty is None and receiver.reference and receiver.mutable_ref:
            raise StructuringError("Invokables must use `self: Pin<&mut Self>` for mutable access", receiver.span)
        if not receiver.is_reference:
            raise StructuringError("Invokables must take self by reference (`&self` or `self: Pin<&mut Self>`)", receiver.span)
        if sig.generics:
            raise StructuringError("Generic invokables are not supported", sig.span)

        specifiers = []
        if options.get("cxx_final"):
            specifiers.append(InvokableSpecifier.FINAL)
        if options.get("cxx_override"):
            specifiers.append(InvokableSpecifier.OVERRIDE)
        if options.get("cxx_virtual"):
            specifiers.append(InvokableSpecifier.VIRTUAL)

        output = sig.output
        if isinstance(output, syntax.TypeTuple) and output.is_unit:
            output = None
        return Invokable(
            ident=sig.ident,
            parameters=BridgeParser._parameters(sig, mapper),
            names=invokable_names(
                sig.ident,
                string_attribute(member.attrs, "cxx_name"),
                string_attribute(member.attrs, "rust_name"),
            ),
            return_type=output,
            return_descriptor=mapper.return_descriptor(output),
            mutable=receiver.is_mutable,
            safe=not sig.unsafe,
            specifiers=tuple(specifiers),
            span=member.span,
        )

    # ---- trait impls

    def _parse_trait_impl(self, impl: syntax.ItemImpl, mapper: TypeMapper) -> Optional[ObjectDescription]:
        if impl.trait is None:
            raise StructuringError("Expected trait impl!", impl.span)
        if impl.attrs:
            raise StructuringError("Attributes are not allowed on trait impls in cxx_qt::bridge", impl.attrs[0].span)

        trait = impl.trait.plain
        span = impl.trait.span
        if trait not in ("cxx_qt::Locking", "cxx_qt::Threading", "cxx_qt::Constructor"):
            raise StructuringError(UNSUPPORTED_TRAIT_MESSAGE, span)

        if self._object_ident(impl.self_ty) is None:
            raise StructuringError(f"{trait} can only be implemented for a qobject (`qobject::T`)", impl.span)
        obj = self._object_for(impl.self_ty)
        if obj is None:
            return None

        if trait == "cxx_qt::Locking":
            if not impl.unsafe:
                raise StructuringError("cxx_qt::Locking must be an unsafe impl", span)
            if not impl.negative:
                raise StructuringError("cxx_qt::Locking is enabled by default, it can only be negated.", span)
            if obj.threading:
                raise StructuringError("cxx_qt::Locking must be enabled if cxx_qt::Threading is enabled", span)
            obj.locking = False
        elif trait == "cxx_qt::Threading":
            if impl.negative:
                raise StructuringError("Negative impls for cxx_qt::Threading are not allowed", span)
            if not obj.locking:
                raise StructuringError("cxx_qt::Locking must be enabled if cxx_qt::Threading is enabled", span)
            obj.threading = True
        else:
            obj.constructors.append(self._parse_constructor(impl, mapper))
        return obj

    @staticmethod
    def _parse_constructor(impl: syntax.ItemImpl, mapper: TypeMapper) -> Constructor:
        trait = impl.trait
        args = trait.last.arguments
        if args is None or args.kind != "angle" or len(args.args) != 1 or not isinstance(args.args[0], syntax.TypeTuple):
            raise StructuringError("cxx_qt::Constructor must have exactly one tuple of arguments, e.g. cxx_qt::Constructor<(i32,)>", trait.span)
        arguments = list(args.args[0].elems)

        groups: Dict[str, List[syntax.Type]] = {name: [] for name in CONSTRUCTOR_GROUPS}
        for member in impl.items:
            if member.kind != "type":
                continue
            if member.ident not in groups:
                raise StructuringError(f"Unknown associated type `{member.ident}` in cxx_qt::Constructor", member.span)
            groups[member.ident] = _tuple_elems(member.ty, f"{member.ident} must be a tuple type")

        routing = route_constructor_arguments(
            [a.to_rust() for a in arguments],
            new=[t.to_rust() for t in groups["NewArguments"]],
            base=[t.to_rust() for t in groups["BaseArguments"]],
            initialize=[t.to_rust() for t in groups["InitializeArguments"]],
        )
        if routing is None:
            rendered = syntax.render_tuple([a.to_rust() for a in arguments])
            raise StructuringError(
                f"NewArguments, BaseArguments and InitializeArguments must partition the constructor arguments {rendered}",
                impl.span,
            )
        return Constructor(
            arguments=arguments,
            descriptors=[mapper.descriptor(a) for a in arguments],
            routing=routing,
            new_arguments=groups["NewArguments"],
            base_arguments=groups["BaseArguments"],
            initialize_arguments=groups["InitializeArguments"],
            span=impl.span,
        )


def parse_bridge(
    file: syntax.File,
    resolver: Optional[CfgResolver] = None,
    dependency_mappings: Optional[NameMappings] = None,
) -> BridgeModule:
    """
    Structure the single `#[cxx_qt::bridge]` module of `file`.
    """
    return BridgeParser(resolver, dependency_mappings).parse(file)


__all__ = ["BridgeParser", "parse_bridge", "route_constructor_arguments", "UNSUPPORTED_TRAIT_MESSAGE"]
