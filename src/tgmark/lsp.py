"""Minimal LSP server for tgmark: diagnostics only."""

from __future__ import annotations

from pathlib import Path

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from tgmark import __version__
from tgmark.cli import load_config
from tgmark.dialects import Dialect
from tgmark.errors import GenerationError, InvalidTokenError, ParseError
from tgmark.formatters import FormatterRegistry, detect_custom
from tgmark.generator import Generator
from tgmark.parser import parse

server = LanguageServer("tgmark-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _detect_names(uri: str) -> list[str]:
    """Formatter names listed under [formatters] detect in the document's tgmark.toml."""
    path = to_fs_path(uri)
    if path is None:
        return []
    config = load_config(None, Path(path).parent)
    section = config.get("formatters")
    if not isinstance(section, dict):
        return []
    names = section.get("detect")
    return [str(name) for name in names] if isinstance(names, list) else []


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the tgmark pipeline and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    diagnostics: list[Diagnostic] = []

    try:
        nodes = parse(source, strict=True)
    except InvalidTokenError as exc:
        line = exc.position.line - 1
        col = exc.position.column - 1
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + 1),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="tgmark",
            )
        )
    except ParseError as exc:
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(
                        line=exc.span.start.line - 1, character=exc.span.start.column - 1
                    ),
                    end=Position(line=exc.span.end.line - 1, character=exc.span.end.column - 1),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="tgmark",
            )
        )
    else:
        try:
            registry = FormatterRegistry.with_builtins()
            nodes = detect_custom(nodes, registry, _detect_names(uri))
            Generator(Dialect.MARKDOWN_V2, formatters=registry).render_all(nodes)
        except GenerationError as exc:
            diagnostics.append(
                Diagnostic(
                    range=Range(
                        start=Position(line=0, character=0),
                        end=Position(line=0, character=0),
                    ),
                    message=exc.message,
                    severity=DiagnosticSeverity.Warning,
                    source="tgmark",
                )
            )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
