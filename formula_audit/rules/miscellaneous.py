"""Assorted deprecated or discouraged formula constructs.

Every rule here is independent; they share a family only for reporting.
Messages mirror the ones formula maintainers already know from ``brew
audit`` so offenses can be searched for in existing discussions.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Pattern, Tuple

from formula_audit.syntax import NodeKind, SyntaxNode

from . import AuditContext, FormulaRule, OffenseDraft, Rule
from .helpers import (
    arguments,
    block_of,
    content_range,
    first_argument,
    inside_class,
    is_call,
    is_double_quoted,
    literal_column,
    literal_name,
    method_name,
    receiver_of,
    remove_statement,
    replace,
    replace_between,
    string_value,
    symbol_name,
)

FAMILY = "Miscellaneous"
CLASS_SCOPES = ("class", "module", "singleton_class")
SKIP_CLEAN_MESSAGE = (
    "`skip_clean :all` is deprecated; brew no longer strips symbols\n"
    "        Pass explicit paths to prevent Homebrew from removing empty folders."
)
NON_GLOB_PATH = re.compile(r"^[^*{},]+$")
MAN_SECTION = re.compile(r"^man[1-8]$")
OPTION_PREFIX = re.compile(r"^-?-?(?:with|without)-")
HEAD_FLAGS = ("--HEAD", "--devel")


def _system_command(node: SyntaxNode) -> Optional[SyntaxNode]:
    """Return the literal command of a ``system "cmd", ...`` call."""

    if not is_call(node, "system", receiver=""):
        return None
    command = first_argument(node)
    if string_value(command) is None:
        return None
    return command


def _dependency_pair(node: SyntaxNode) -> Optional[SyntaxNode]:
    """Return the ``"dep" => options`` pair of a ``depends_on`` call."""

    if not is_call(node, "depends_on", receiver=""):
        return None
    argument = first_argument(node)
    if argument is None or argument.type != "pair":
        return None
    return argument


def _option_literals(value: SyntaxNode) -> List[SyntaxNode]:
    if value.type == "array":
        return [child for child in value.named_children if child.type != "comment"]
    return [value]


class _MiscRule(FormulaRule):
    family = FAMILY
    target_kinds = frozenset({NodeKind.METHOD_CALL})


# ----------------------------------------------------------------------
# Formula DSL
# ----------------------------------------------------------------------
class FileUtilsNamespaceRule(_MiscRule):
    id = "Miscellaneous/FileUtilsNamespace"
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_call(node, context.tables.fileutils_methods, receiver="FileUtils"):
            return
        receiver = receiver_of(node)
        method = node.child_by_field("method")
        if receiver is None or method is None:
            return
        yield self.at(
            node,
            f"Don't need 'FileUtils.' before {method.text}",
            fix=replace_between(receiver.start, method.start, ""),
        )


class InreplaceBlockVariableRule(_MiscRule):
    id = "Miscellaneous/InreplaceBlockVariable"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_call(node, "inreplace", receiver=""):
            return
        block = block_of(node)
        parameters = block.child_by_field("parameters") if block is not None else None
        if parameters is None:
            return
        names = parameters.named_children
        if len(names) != 1 or len(names[0].text) <= 1:
            return
        yield self.at(node, f'"inreplace <filenames> do |s|" is preferred over "|{names[0].text}|".')


class ZeroRebuildRule(_MiscRule):
    id = "Miscellaneous/ZeroRebuild"
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_call(node, "rebuild", receiver=""):
            return
        value = first_argument(node)
        if value is not None and value.type == "integer" and value.text == "0":
            yield self.at(node, "'rebuild 0' should be removed", fix=remove_statement(context.source, node))


class LinuxCheckRule(_MiscRule):
    """Only meaningful for the core tap; restricted by path in the exemption table."""

    id = "Miscellaneous/LinuxCheck"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if is_call(node, "linux?", receiver="OS"):
            yield self.at(node, "Don't use OS.linux?; Homebrew/core only supports macOS")


class LlvmFailureRule(_MiscRule):
    id = "Miscellaneous/LlvmFailure"
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if is_call(node, "fails_with", receiver="") and symbol_name(first_argument(node)) == "llvm":
            yield self.at(
                node,
                "'fails_with :llvm' is now a no-op so should be removed",
                fix=remove_statement(context.source, node),
            )


class LegacyTestMethodRule(_MiscRule):
    id = "Miscellaneous/LegacyTestMethod"
    target_kinds = frozenset({NodeKind.METHOD_DEFINITION})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if node.type != "method" or not inside_class(node):
            return
        name = node.child_by_field("name")
        if name is None or name.text != "test":
            return
        fix = None
        if node.child_by_field("parameters") is None:
            fix = replace_between(node.start, name.end, "test do")
        yield self.at(node, "Use new-style test definitions (test do)", fix=fix)


class TopLevelMethodRule(_MiscRule):
    id = "Miscellaneous/TopLevelMethod"
    target_kinds = frozenset({NodeKind.METHOD_DEFINITION})

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if node.type != "method":
            return
        if any(ancestor.type in CLASS_SCOPES for ancestor in node.ancestors()):
            return
        name = node.child_by_field("name")
        label = name.text if name is not None else "?"
        yield self.at(node, f"Define method {label} in the class body, not at the top-level")


class SkipCleanAllRule(_MiscRule):
    id = "Miscellaneous/SkipCleanAll"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if is_call(node, "skip_clean", receiver="") and symbol_name(first_argument(node)) == "all":
            yield self.at(node, SKIP_CLEAN_MESSAGE)


class UniversalBinaryRule(_MiscRule):
    id = "Miscellaneous/UniversalBinary"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not (is_call(node, "universal?", receiver="build") or is_call(node, "universal_binary", receiver="ENV")):
            return
        receiver = receiver_of(node)
        if receiver is None:
            return
        call = f"{receiver.text}.{method_name(node)}"
        yield self.at(node, f"macOS has been 64-bit only since 10.6 so {call} is deprecated.")


class DeprecatedEnvMethodRule(_MiscRule):
    id = "Miscellaneous/DeprecatedEnvMethod"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        methods = context.tables.deprecated_env_methods
        if is_call(node, tuple(methods), receiver="ENV"):
            yield self.at(node, methods[method_name(node)])


class RequirementInstanceRule(_MiscRule):
    id = "Miscellaneous/RequirementInstance"
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_call(node, "depends_on", receiver=""):
            return
        requirement = first_argument(node)
        if requirement is not None and requirement.type == "pair":
            requirement = requirement.child_by_field("key")
        if requirement is None or not is_call(requirement, "new") or arguments(requirement):
            return
        klass = receiver_of(requirement)
        if klass is None or klass.kind is not NodeKind.CONSTANT_REFERENCE:
            return
        yield self.at(
            requirement,
            "`depends_on` can take requirement classes instead of instances",
            fix=replace(requirement, klass.text),
        )


class LegacyMacOSCheckRule(_MiscRule):
    id = "Miscellaneous/LegacyMacOSCheck"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if is_call(node, context.tables.legacy_macos_checks, receiver="MacOS"):
            yield self.at(
                node,
                f'"MacOS.{method_name(node)}" is deprecated, use a comparison to MacOS.version instead',
            )


class NonGlobDirRule(_MiscRule):
    id = "Miscellaneous/NonGlobDir"
    target_kinds = frozenset({NodeKind.ELEMENT_REFERENCE})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        target = node.child_by_field("object")
        if target is None or target.text != "Dir":
            return
        args = arguments(node)
        if len(args) != 1:
            return
        path = string_value(args[0])
        if path is None:
            return
        match = NON_GLOB_PATH.search(path)
        if not match:
            return
        yield self.at_column(
            args[0].line,
            literal_column(args[0], match.start()),
            f'Dir(["{path}"]) is unnecessary; just use "{match.group(0)}"',
            fix=replace(node, args[0].text),
        )


class ArgvOptionsRule(_MiscRule):
    id = "Miscellaneous/ArgvOptions"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_call(node, receiver="ARGV") or _is_head_flag_check(node):
            return
        yield self.at(node, "Use build instead of ARGV to check options")


def _is_head_flag_check(node: SyntaxNode) -> bool:
    return is_call(node, "include?", receiver="ARGV") and string_value(first_argument(node)) in HEAD_FLAGS


class ArgvHeadFlagRule(_MiscRule):
    id = "Miscellaneous/ArgvHeadFlag"
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_call(node, "include?", receiver="ARGV"):
            return
        flag = first_argument(node)
        value = string_value(flag)
        if flag is None or value is None or value not in HEAD_FLAGS:
            return
        query = f"build.{value.lstrip('-').lower()}?"
        yield self.at_column(
            flag.line,
            literal_column(flag),
            f'Use "if {query}" instead',
            fix=replace(node, query),
        )


class ManPathConcatenationRule(_MiscRule):
    """``man+"man8"`` is spelled ``man8``.

    ``man +"man8"`` parses as a call to ``man`` with a unary argument, so
    both shapes are recognised.
    """

    id = "Miscellaneous/ManPathConcatenation"
    target_kinds = frozenset({NodeKind.OPERATOR, NodeKind.METHOD_CALL})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        section = self._section(node)
        if section is None:
            return
        value = string_value(section)
        yield self.at_column(
            section.line,
            literal_column(section),
            f'"{node.text}" should be "{value}"',
            fix=replace(node, str(value)),
        )

    def _section(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        if node.type == "binary":
            left = node.child_by_field("left")
            operator = node.child_by_field("operator")
            right = node.child_by_field("right")
            if left is None or operator is None or left.text != "man" or operator.text != "+":
                return None
        elif is_call(node, "man", receiver=""):
            args = arguments(node)
            if len(args) != 1 or args[0].type != "unary" or not args[0].text.startswith("+"):
                return None
            right = args[0].child_by_field("operand")
        else:
            return None
        if right is None or not MAN_SECTION.search(string_value(right) or ""):
            return None
        return right


class DeprecatedConstantRule(_MiscRule):
    id = "Miscellaneous/DeprecatedConstant"
    target_kinds = frozenset({NodeKind.CONSTANT_REFERENCE})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if node.type != "constant" or node.text not in context.tables.deprecated_constants:
            return
        if node.parent is not None and node.parent.type in ("scope_resolution", "class", "module"):
            return
        replacement = context.tables.deprecated_constants[node.text]
        yield self.at(node, f"Use {replacement} instead of {node.text}", fix=replace(node, replacement))


class VersionHeadComparisonRule(_MiscRule):
    id = "Miscellaneous/VersionHeadComparison"
    target_kinds = frozenset({NodeKind.OPERATOR})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if node.type != "binary":
            return
        left = node.child_by_field("left")
        operator = node.child_by_field("operator")
        right = node.child_by_field("right")
        if left is None or operator is None or right is None:
            return
        if left.text == "version" and operator.text == "==" and string_value(right) == "HEAD":
            yield self.at(node, "Use 'build.head?' instead of inspecting 'version'", fix=replace(node, "build.head?"))


# ----------------------------------------------------------------------
# Shell commands
# ----------------------------------------------------------------------
class InstallNameToolRule(_MiscRule):
    id = "Miscellaneous/InstallNameTool"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        command = _system_command(node)
        if command is not None and string_value(command) == "install_name_tool":
            yield self.at_column(
                command.line,
                literal_column(command),
                'Use ruby-macho instead of calling "install_name_tool"',
            )


class NpmInstallArgsRule(_MiscRule):
    id = "Miscellaneous/NpmInstallArgs"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if _system_command(node) is None:
            return
        args = arguments(node)
        if len(args) < 2 or string_value(args[0]) != "npm" or string_value(args[1]) != "install":
            return
        if "Language::Node" in node.text:
            return
        yield self.at(node, "Use Language::Node for npm install args")


class SystemFileUtilsRule(_MiscRule):
    id = "Miscellaneous/SystemFileUtils"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        command = _system_command(node)
        if command is None:
            return
        words = str(string_value(command)).split()
        if not words or words[0] not in context.tables.fileutils_methods:
            return
        yield self.at_column(
            command.line,
            literal_column(command),
            f"Use the `{words[0]}` Ruby method instead of `{node.text}`",
        )


class ShellEnvironmentRule(_MiscRule):
    id = "Miscellaneous/ShellEnvironment"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        command = _system_command(node)
        if command is None:
            return
        commands = context.tables.environment_commands
        if not commands:
            return
        pattern = re.compile(r"^(%s)(?=\s|$)" % "|".join(re.escape(name) for name in commands))
        match = pattern.search(str(string_value(command)))
        if match:
            yield self.at_column(
                command.line,
                literal_column(command, match.start()),
                f"Use ENV instead of invoking '{match.group(1)}' to modify the environment",
            )


class HardcodedCompilerRule(_MiscRule):
    """Compilers are chosen by the build environment, never by absolute path."""

    id = "Miscellaneous/HardcodedCompiler"
    target_kinds = frozenset({NodeKind.METHOD_CALL, NodeKind.ASSIGNMENT})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        literal = self._compiler_literal(node)
        value = string_value(literal)
        if literal is None or value is None:
            return
        for helper, pattern in _compiler_patterns(context):
            match = pattern.search(value)
            if not match:
                continue
            fix = None
            if is_double_quoted(literal):
                start, _ = content_range(literal)
                fix = replace_between(start + match.start(), start + match.end(), "#{ENV.%s}" % helper)
            yield self.at_column(
                literal.line,
                literal_column(literal, match.start()),
                f'Use "#{{ENV.{helper}}}" instead of hard-coding "{match.group(1)}"',
                fix=fix,
            )
            return

    def _compiler_literal(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        if node.type == "assignment":
            target = node.child_by_field("left")
            if target is None or target.type != "element_reference":
                return None
            env = target.child_by_field("object")
            if env is None or env.text != "ENV":
                return None
            return node.child_by_field("right")
        return _system_command(node)


def _compiler_patterns(context: AuditContext) -> List[Tuple[str, Pattern[str]]]:
    patterns = []
    for helper, names in context.tables.compilers.items():
        alternatives = "|".join(re.escape(name) for name in names)
        patterns.append((helper, re.compile(r"^(?:/usr/bin/)?(%s)(?=\s|$)" % alternatives)))
    return patterns


# ----------------------------------------------------------------------
# Strings
# ----------------------------------------------------------------------
class PathShortcutRule(_MiscRule):
    """``"#{prefix}/share/man"`` should use the ``man`` path helper."""

    id = "Miscellaneous/PathShortcut"
    target_kinds = frozenset({NodeKind.LITERAL})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if node.type != "string":
            return
        shortcuts = context.tables.path_shortcuts
        parts = node.children
        for index, part in enumerate(parts[:-1]):
            if part.type != "interpolation":
                continue
            inner = part.named_children
            if len(inner) != 1 or inner[0].type != "identifier" or inner[0].text not in shortcuts:
                continue
            fragment = parts[index + 1]
            if fragment.type != "string_content":
                continue
            helper = inner[0].text
            for pattern in shortcuts[helper]:
                match = pattern.search(fragment.text)
                if not match:
                    continue
                shortcut = match.group("shortcut")
                yield self.at_column(
                    fragment.line,
                    literal_column(fragment, match.start()),
                    '"#{%s}%s" should be "#{%s}"' % (helper, match.group(0), shortcut),
                    fix=replace_between(part.start, fragment.start + match.end(), "#{%s}" % shortcut),
                )
                return


# ----------------------------------------------------------------------
# Dependencies
# ----------------------------------------------------------------------
class VendoredDependencyRule(_MiscRule):
    id = "Miscellaneous/VendoredDependency"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        pair = _dependency_pair(node)
        value = pair.child_by_field("value") if pair is not None else None
        languages = context.tables.vendored_languages
        if value is None or not languages:
            return
        pattern = re.compile(r"(%s)(\d*)" % "|".join(re.escape(name) for name in languages))
        for option in _option_literals(value):
            name = symbol_name(option)
            match = pattern.search(name) if name is not None else None
            if match:
                yield self.at_column(
                    option.line,
                    literal_column(option, match.start()),
                    f"{match.group(1)} modules should be vendored rather than use deprecated {node.text}`",
                )
                return


class DependencyOptionRule(_MiscRule):
    id = "Miscellaneous/DependencyOption"

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        pair = _dependency_pair(node)
        if pair is None:
            return
        dependency = pair.child_by_field("key")
        value = pair.child_by_field("value")
        name = literal_name(dependency)
        if dependency is None or value is None or name is None:
            return
        for option in _option_literals(value):
            tag = string_value(option)
            if tag is not None and tag not in context.tables.dependency_tags:
                yield self.at(dependency, f"Dependency {name} should not use option {tag}")


class ConditionalDependencyRule(_MiscRule):
    """``depends_on "x" if build.with? "x"`` is what ``:optional`` means."""

    id = "Miscellaneous/ConditionalDependency"
    target_kinds = frozenset({NodeKind.CONDITIONAL})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if node.type not in ("if_modifier", "unless_modifier"):
            return
        body = node.child_by_field("body")
        condition = node.child_by_field("condition")
        if body is None or condition is None or not is_call(body, "depends_on", receiver=""):
            return
        dependency = first_argument(body)
        name = literal_name(dependency)
        if name is None or len(arguments(body)) != 1:
            return
        tag = self._tag(node.type, condition, name)
        if tag is None:
            return
        replacement = f"{body.text} => :{tag}"
        yield self.at(node, f"Replace {node.text} with {replacement}", fix=replace(node, replacement))

    def _tag(self, conditional: str, condition: SyntaxNode, name: str) -> Optional[str]:
        if not is_call(condition, ("with?", "without?", "include?"), receiver="build"):
            return None
        option = string_value(first_argument(condition))
        if option is None:
            return None
        query = method_name(condition)
        if OPTION_PREFIX.sub("", option) != name:
            return None
        if conditional == "if_modifier":
            if query == "with?" or (query == "include?" and option.lstrip("-").startswith("with-")):
                return "optional"
        elif query == "without?" or (query == "include?" and option.lstrip("-").startswith("without-")):
            return "recommended"
        return None


def get_rules() -> List[Rule]:
    return [
        FileUtilsNamespaceRule(),
        InreplaceBlockVariableRule(),
        ZeroRebuildRule(),
        LinuxCheckRule(),
        LlvmFailureRule(),
        LegacyTestMethodRule(),
        TopLevelMethodRule(),
        SkipCleanAllRule(),
        UniversalBinaryRule(),
        DeprecatedEnvMethodRule(),
        InstallNameToolRule(),
        NpmInstallArgsRule(),
        RequirementInstanceRule(),
        LegacyMacOSCheckRule(),
        NonGlobDirRule(),
        SystemFileUtilsRule(),
        ArgvOptionsRule(),
        ArgvHeadFlagRule(),
        ManPathConcatenationRule(),
        HardcodedCompilerRule(),
        PathShortcutRule(),
        VendoredDependencyRule(),
        ShellEnvironmentRule(),
        DependencyOptionRule(),
        VersionHeadComparisonRule(),
        DeprecatedConstantRule(),
        ConditionalDependencyRule(),
    ]
