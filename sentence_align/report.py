"""
Errata Report v1.0.0
====================
Turns an alignment into an errata table and exports it.

Rows are built for every item that is not an unchanged match. Matched
and moved pairs get character-level highlighting from diff-match-patch,
with the same semantic cleanup the document differ uses.

Export formats:
- JSON (full metadata)
- CSV (UTF-8 with BOM so Excel detects the encoding)
- HTML (self-contained table)
- Word (python-docx table)
"""

import csv
import html
import json
from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO, StringIO
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import diff_match_patch as dmp_module
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from config_logging import ProcessingError, ValidationError, get_logger

from .aligner import get_alignment_statistics
from .models import AlignmentItem, AlignmentType, Delete, Insert, Match, is_plain_match

logger = get_logger('sentence_align.report')

# diff_match_patch operation codes
DIFF_DELETE = -1
DIFF_EQUAL = 0
DIFF_INSERT = 1

TYPE_LABELS = {
    AlignmentType.MATCH: 'Modified',
    AlignmentType.DELETE: 'Deleted',
    AlignmentType.INSERT: 'Added',
    AlignmentType.MOVEOUT: 'Moved out',
    AlignmentType.MOVEIN: 'Moved in',
}

CSV_HEADERS = [
    'Row', 'Type', 'Similarity',
    'Source Sentence', 'Source Lines', 'Original Text',
    'Target Sentence', 'Target Lines', 'Revised Text',
]


@dataclass
class ErrataRow:
    """
    One row of the errata table.

    Attributes:
        row_index: 1-based position of the item in the alignment
        kind: Alignment type value (match, delete, insert, moveout, movein)
        source_text: Original text ('' for inserts)
        target_text: Revised text ('' for deletes)
        source_label: 1-based sentence number(s), e.g. "3" or "3-4"
        target_label: Same for the revised side
        source_lines: Source line numbers
        target_lines: Target line numbers
        similarity: Similarity score (None for deletes and inserts)
        source_html: Escaped source text with deletions highlighted
        target_html: Escaped target text with additions highlighted
        changes: Character-level edits as {'op', 'text'} dicts
    """
    row_index: int
    kind: str
    source_text: str = ''
    target_text: str = ''
    source_label: str = ''
    target_label: str = ''
    source_lines: List[int] = field(default_factory=list)
    target_lines: List[int] = field(default_factory=list)
    similarity: Optional[float] = None
    source_html: str = ''
    target_html: str = ''
    changes: List[Dict[str, str]] = field(default_factory=list)

    @property
    def label(self) -> str:
        return TYPE_LABELS[AlignmentType(self.kind)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'row_index': self.row_index,
            'type': self.kind,
            'label': self.label,
            'source_text': self.source_text,
            'target_text': self.target_text,
            'source_label': self.source_label,
            'target_label': self.target_label,
            'source_lines': self.source_lines,
            'target_lines': self.target_lines,
            'similarity': round(self.similarity, 4) if self.similarity is not None else None,
            'source_html': self.source_html,
            'target_html': self.target_html,
            'changes': self.changes,
        }


def index_label(indices: Sequence[int]) -> str:
    """1-based sentence number, or first-last range for merged sentences."""
    if not indices:
        return ''
    if len(indices) == 1:
        return str(indices[0] + 1)
    return f"{indices[0] + 1}-{indices[-1] + 1}"


def _new_dmp() -> 'dmp_module.diff_match_patch':
    dmp = dmp_module.diff_match_patch()
    dmp.Diff_Timeout = 2.0  # Max 2 seconds per diff
    dmp.Diff_EditCost = 4
    return dmp


def diff_texts(old_text: str, new_text: str, dmp=None):
    """
    Character-level diff of two sentences.

    Returns:
        Tuple of (changes, old_html, new_html)
    """
    dmp = dmp or _new_dmp()
    diffs = dmp.diff_main(old_text, new_text)
    dmp.diff_cleanupSemantic(diffs)

    changes: List[Dict[str, str]] = []
    old_parts: List[str] = []
    new_parts: List[str] = []
    for op, text in diffs:
        escaped = html.escape(text)
        if op == DIFF_EQUAL:
            old_parts.append(escaped)
            new_parts.append(escaped)
        elif op == DIFF_DELETE:
            old_parts.append(f'<span class="pa-deleted">{escaped}</span>')
            changes.append({'op': 'deleted', 'text': text})
        elif op == DIFF_INSERT:
            new_parts.append(f'<span class="pa-added">{escaped}</span>')
            changes.append({'op': 'added', 'text': text})

    return changes, ''.join(old_parts), ''.join(new_parts)


def build_errata(alignment: Sequence[AlignmentItem], include_exact: bool = False) -> List[ErrataRow]:
    """
    Build errata rows from an alignment.

    Args:
        alignment: Ordered alignment items
        include_exact: Also emit rows for unchanged matches

    Returns:
        List of ErrataRow
    """
    dmp = _new_dmp()
    rows: List[ErrataRow] = []

    for pos, item in enumerate(alignment, start=1):
        if isinstance(item, Delete):
            rows.append(ErrataRow(
                row_index=pos,
                kind=item.kind.value,
                source_text=item.source_text,
                source_label=index_label(item.source_indices),
                source_lines=list(item.source_lines),
                source_html=f'<span class="pa-deleted">{html.escape(item.source_text)}</span>',
            ))
        elif isinstance(item, Insert):
            rows.append(ErrataRow(
                row_index=pos,
                kind=item.kind.value,
                target_text=item.target_text,
                target_label=index_label(item.target_indices),
                target_lines=list(item.target_lines),
                target_html=f'<span class="pa-added">{html.escape(item.target_text)}</span>',
            ))
        elif isinstance(item, Match):
            unchanged = item.source_text == item.target_text
            if is_plain_match(item) and item.similarity >= 1.0 and unchanged and not include_exact:
                continue
            changes, source_html, target_html = diff_texts(item.source_text, item.target_text, dmp)
            rows.append(ErrataRow(
                row_index=pos,
                kind=item.kind.value,
                source_text=item.source_text,
                target_text=item.target_text,
                source_label=index_label(item.source_indices),
                target_label=index_label(item.target_indices),
                source_lines=list(item.source_lines),
                target_lines=list(item.target_lines),
                similarity=item.similarity,
                source_html=source_html,
                target_html=target_html,
                changes=changes,
            ))

    logger.debug(f"Built {len(rows)} errata rows from {len(alignment)} items")
    return rows


def _lines_text(lines: Sequence[int]) -> str:
    return ', '.join(str(n) for n in lines)


# =============================================================================
# EXPORTERS
# =============================================================================

def export_json(alignment: Sequence[AlignmentItem], source_name: str = '',
                target_name: str = '', options: Optional[Dict[str, Any]] = None) -> str:
    """Export the alignment and its errata rows to JSON."""
    export_data = {
        'metadata': {
            'source_document': source_name or 'Original',
            'target_document': target_name or 'Revised',
            'generated_at': datetime.now().isoformat(),
            'options': options or {},
            'statistics': get_alignment_statistics(alignment).to_dict(),
        },
        'alignment': [item.to_dict() for item in alignment],
        'errata': [row.to_dict() for row in build_errata(alignment)],
    }
    return json.dumps(export_data, indent=2, ensure_ascii=False)


def export_csv(alignment: Sequence[AlignmentItem], source_name: str = '',
               target_name: str = '', options: Optional[Dict[str, Any]] = None) -> str:
    """Export errata rows to CSV; the content starts with a UTF-8 BOM."""
    output = StringIO()
    output.write('\ufeff')
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADERS)
    for row in build_errata(alignment):
        writer.writerow([
            row.row_index,
            row.label,
            f"{row.similarity:.2f}" if row.similarity is not None else '',
            row.source_label,
            _lines_text(row.source_lines),
            row.source_text,
            row.target_label,
            _lines_text(row.target_lines),
            row.target_text,
        ])
    return output.getvalue()


HTML_STYLE = """
        body { font-family: "SimSun", serif; font-size: 14px; line-height: 1.6;
               max-width: 1400px; margin: 0 auto; padding: 20px; background: #f5f5f5; }
        .header { background: #2c3e50; color: white; padding: 20px; border-radius: 5px; }
        .stats span { margin-right: 16px; }
        table { width: 100%; border-collapse: collapse; margin-top: 10px; background: white; }
        th { background: #3498db; color: white; padding: 8px; text-align: left; }
        td { padding: 8px; border: 1px solid #ddd; vertical-align: top; }
        tr.match { border-left: 4px solid #f39c12; }
        tr.delete { border-left: 4px solid #e74c3c; }
        tr.insert { border-left: 4px solid #27ae60; }
        tr.moveout, tr.movein { border-left: 4px solid #8e44ad; }
        .index { color: #7f8c8d; margin-right: 4px; }
        .pa-deleted { background: #fadbd8; text-decoration: line-through; }
        .pa-added { background: #d5f5e3; }
"""


def export_html(alignment: Sequence[AlignmentItem], source_name: str = '',
                target_name: str = '', options: Optional[Dict[str, Any]] = None) -> str:
    """Export errata rows as a self-contained HTML page."""
    source_title = html.escape(source_name or 'Original')
    target_title = html.escape(target_name or 'Revised')
    stats = get_alignment_statistics(alignment)
    settings = options or {}

    parts = [
        '<!DOCTYPE html>',
        '<html>',
        '<head>',
        '    <meta charset="UTF-8">',
        '    <title>Sentence Alignment Errata</title>',
        f'    <style>{HTML_STYLE}    </style>',
        '</head>',
        '<body>',
        '<div class="header">',
        '    <h1>Sentence Alignment Errata</h1>',
        f'    <p>{source_title} &rarr; {target_title}</p>',
        '    <p class="stats">'
        f'<span>Total: {stats.total}</span>'
        f'<span>Match: {stats.match}</span>'
        f'<span>Deleted: {stats.delete}</span>'
        f'<span>Added: {stats.insert}</span>'
        f'<span>Moved: {stats.moveout}</span></p>',
    ]
    if settings:
        parts.append('    <p>' + html.escape(', '.join(f"{k}={v}" for k, v in settings.items())) + '</p>')
    parts += [
        '</div>',
        '<table>',
        '    <thead><tr><th>#</th><th>Type</th><th>Similarity</th>'
        f'<th>{source_title}</th><th>{target_title}</th></tr></thead>',
        '    <tbody>',
    ]

    for row in build_errata(alignment):
        similarity = f"{row.similarity:.2f}" if row.similarity is not None else ''
        source_cell = ''
        if row.source_text:
            source_cell = (f'<span class="index">[{row.source_label}, {_lines_text(row.source_lines)}]</span>'
                           f'{row.source_html}')
        target_cell = ''
        if row.target_text:
            target_cell = (f'<span class="index">[{row.target_label}, {_lines_text(row.target_lines)}]</span>'
                           f'{row.target_html}')
        parts.append(
            f'    <tr class="{row.kind}"><td>{row.row_index}</td><td>{row.label}</td>'
            f'<td>{similarity}</td><td>{source_cell}</td><td>{target_cell}</td></tr>'
        )

    parts += ['    </tbody>', '</table>', '</body>', '</html>', '']
    return '\n'.join(parts)


def export_docx(alignment: Sequence[AlignmentItem], source_name: str = '',
                target_name: str = '', options: Optional[Dict[str, Any]] = None) -> bytes:
    """Export errata rows to a Word document and return its bytes."""
    doc = Document()

    title = doc.add_heading('Sentence Alignment Errata', 0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    stats = get_alignment_statistics(alignment)
    doc.add_paragraph(f"Original: {source_name or 'Original'}")
    doc.add_paragraph(f"Revised: {target_name or 'Revised'}")
    doc.add_paragraph(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    doc.add_paragraph(
        f"Items: {stats.total} (match {stats.match}, deleted {stats.delete}, "
        f"added {stats.insert}, moved {stats.moveout})"
    )

    rows = build_errata(alignment)
    table = doc.add_table(rows=1, cols=5)
    table.style = 'Table Grid'
    header = table.rows[0].cells
    for cell, text in zip(header, ['#', 'Type', 'Similarity', 'Original', 'Revised']):
        cell.text = ''
        run = cell.paragraphs[0].add_run(text)
        run.bold = True

    for row in rows:
        cells = table.add_row().cells
        cells[0].text = str(row.row_index)
        cells[1].text = row.label
        cells[2].text = f"{row.similarity:.2f}" if row.similarity is not None else ''
        _write_diff_cell(cells[3], row.source_text, row.changes, 'deleted')
        _write_diff_cell(cells[4], row.target_text, row.changes, 'added')

    for paragraph_cells in table.rows:
        for cell in paragraph_cells.cells:
            for paragraph in cell.paragraphs:
                for run in paragraph.runs:
                    run.font.size = Pt(9)

    output = BytesIO()
    doc.save(output)
    return output.getvalue()


def _write_diff_cell(cell, text: str, changes: List[Dict[str, str]], highlight_op: str) -> None:
    """Write ``text`` into a table cell, bolding the changed spans of one side."""
    cell.text = ''
    paragraph = cell.paragraphs[0]
    if not text:
        return
    if not changes:
        paragraph.add_run(text)
        return

    spans = [c['text'] for c in changes if c['op'] == highlight_op]
    cursor = 0
    for span in spans:
        found = text.find(span, cursor)
        if found < 0:
            continue
        if found > cursor:
            paragraph.add_run(text[cursor:found])
        run = paragraph.add_run(span)
        run.bold = True
        if highlight_op == 'deleted':
            run.font.strike = True
        else:
            run.underline = True
        cursor = found + len(span)
    if cursor < len(text):
        paragraph.add_run(text[cursor:])


Exporter = Callable[..., Union[str, bytes]]

EXPORTERS: Dict[str, Exporter] = {
    'json': export_json,
    'csv': export_csv,
    'html': export_html,
    'docx': export_docx,
}

MIME_TYPES = {
    'json': 'application/json',
    'csv': 'text/csv',
    'html': 'text/html',
    'docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
}


def export_alignment(alignment: Sequence[AlignmentItem], fmt: str, **kwargs) -> Union[str, bytes]:
    """
    Export an alignment in the named format.

    Raises:
        ValidationError: Unknown format
        ProcessingError: Exporter failure
    """
    exporter = EXPORTERS.get((fmt or '').lower())
    if exporter is None:
        raise ValidationError(f"Unsupported export format: {fmt}", field='format')
    try:
        return exporter(alignment, **kwargs)
    except Exception as e:
        logger.error(f"Export to {fmt} failed: {e}", exc_info=True)
        raise ProcessingError(f"Export to {fmt} failed: {e}", stage='export') from e


def write_export(alignment: Sequence[AlignmentItem], fmt: str, path: str, **kwargs) -> str:
    """Export to a file and return its path."""
    content = export_alignment(alignment, fmt, **kwargs)
    if isinstance(content, bytes):
        with open(path, 'wb') as f:
            f.write(content)
    else:
        # CSV content already carries its BOM
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
    logger.info(f"Exported {len(alignment)} items as {fmt} to {path}")
    return path
