"""Extraction: source files to registration records."""

from loaddefs.extract.classifier import FormClassifier
from loaddefs.extract.expander import (
    MacroExpander,
    NullExpander,
    RuleExpander,
    builtin_expander,
)
from loaddefs.extract.extractor import FileExtractor, PackageData, SourceFile
from loaddefs.extract.names import file_load_name
from loaddefs.extract.prefixes import collect_definition_names, make_prefixes
from loaddefs.extract.radix import RadixTree
from loaddefs.extract.records import (
    ClassDecl,
    CustomDecl,
    DestinationEntry,
    FunctionDecl,
    GroupDecl,
    PackageVersion,
    PrefixDecl,
    RegistrationRecord,
    VariableDecl,
    Verbatim,
    render_record,
)

__all__ = [
    # Pipeline
    "FileExtractor",
    "FormClassifier",
    "PackageData",
    "SourceFile",
    "file_load_name",
    # Expansion
    "MacroExpander",
    "NullExpander",
    "RuleExpander",
    "builtin_expander",
    # Prefixes
    "RadixTree",
    "collect_definition_names",
    "make_prefixes",
    # Records
    "ClassDecl",
    "CustomDecl",
    "DestinationEntry",
    "FunctionDecl",
    "GroupDecl",
    "PackageVersion",
    "PrefixDecl",
    "RegistrationRecord",
    "VariableDecl",
    "Verbatim",
    "render_record",
]
