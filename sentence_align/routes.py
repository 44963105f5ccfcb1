"""
Sentence Alignment Flask Routes
===============================
API endpoints for aligning an original and a revised document.

Endpoints:
- POST /api/align                 Align two documents, return items and statistics
- POST /api/align/export/<fmt>    Align and download the errata (json, csv, html, docx)
- GET  /api/align/defaults        Default alignment options
- GET  /api/align/health          Module health check
"""

import time
from functools import wraps
from typing import Any, List, Tuple

from flask import Blueprint, Response, g, jsonify, request

from config_logging import (
    ConfigurationError, FileError, ProcessingError, ProofAlignError, ValidationError,
    get_logger,
)

from . import __version__
from .aligner import SentenceAligner
from .models import AlignmentResult, Sentence, sentences_from_list
from .options import AlignmentOptions
from .report import MIME_TYPES, export_alignment
from .segmenter import load_sentences

logger = get_logger('sentence_align.routes')

# Create blueprint
align_blueprint = Blueprint('sentence_align', __name__, url_prefix='/api/align')

# Requests beyond this many sentences per side are rejected
MAX_SENTENCES = 50000


# =============================================================================
# STANDARDIZED ERROR HANDLING DECORATOR
# =============================================================================

def _error_response(code: str, message: str, status: int, **extra: Any):
    error = {
        'code': code,
        'message': message,
        'correlation_id': getattr(g, 'correlation_id', 'unknown'),
    }
    error.update(extra)
    return jsonify({'success': False, 'error': error}), status


def handle_align_errors(f):
    """
    Decorator for standardized API error handling in alignment routes.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        start_time = time.time()
        try:
            result = f(*args, **kwargs)

            # Log slow operations
            elapsed = time.time() - start_time
            if elapsed > 5.0:
                logger.warning(f"Slow alignment API call: {f.__name__} took {elapsed:.1f}s")

            return result

        except ConfigurationError as e:
            logger.warning(f"Configuration error in {f.__name__}: {e}")
            return _error_response(e.code, e.message, e.status_code, field=e.field)
        except (ValidationError, FileError) as e:
            logger.warning(f"Validation error in {f.__name__}: {e}")
            return _error_response(e.code, e.message, e.status_code)
        except ProcessingError as e:
            logger.error(f"Processing error in {f.__name__}: {e}")
            return _error_response(e.code, e.message, e.status_code)
        except ProofAlignError as e:
            logger.error(f"Error in {f.__name__}: {e}")
            return _error_response(e.code, e.message, e.status_code)
        except Exception as e:
            logger.exception(f"Unexpected error in {f.__name__}: {e}")
            return _error_response('INTERNAL_ERROR', 'An unexpected error occurred', 500)

    return decorated


# =============================================================================
# REQUEST PARSING
# =============================================================================

def _parse_side(data: dict, key: str) -> List[Sentence]:
    """Sentences from raw text (one per line) or a list of strings."""
    value = data.get(key)
    if value is None:
        raise ValidationError(f"'{key}' is required", field=key)

    if isinstance(value, str):
        sentences = load_sentences(value)
    elif isinstance(value, list) and all(isinstance(v, str) for v in value):
        sentences = sentences_from_list(value)
    else:
        raise ValidationError(f"'{key}' must be text or a list of strings", field=key)

    if len(sentences) > MAX_SENTENCES:
        raise ValidationError(
            f"'{key}' has {len(sentences)} sentences (limit {MAX_SENTENCES})", field=key)
    return sentences


def _run_alignment() -> Tuple[AlignmentResult, AlignmentOptions, dict]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    source = _parse_side(data, 'source')
    target = _parse_side(data, 'target')
    options = AlignmentOptions.from_dict(data.get('options'))

    result = SentenceAligner(options).align(source, target)
    logger.info(
        f"Aligned {result.source_count} -> {result.target_count} sentences: "
        f"{result.statistics.changed} changed items"
    )
    return result, options, data


# =============================================================================
# ROUTES
# =============================================================================

@align_blueprint.route('', methods=['POST'])
@handle_align_errors
def align():
    """
    Align two documents.

    Request body:
        { source: str | [str], target: str | [str], options: {...} }

    Returns:
        { success: true, alignment: [...], statistics: {...}, options: {...} }
    """
    result, options, _ = _run_alignment()
    payload = result.to_dict()
    return jsonify({
        'success': True,
        'alignment': payload['alignment'],
        'statistics': payload['statistics'],
        'source_count': result.source_count,
        'target_count': result.target_count,
        'runtime_seconds': payload['runtime_seconds'],
        'options': options.to_dict(),
    })


@align_blueprint.route('/export/<fmt>', methods=['POST'])
@handle_align_errors
def export(fmt: str):
    """Align two documents and return the errata as a downloadable file."""
    fmt = fmt.lower()
    if fmt not in MIME_TYPES:
        raise ValidationError(f"Unsupported export format: {fmt}", field='format')

    result, options, data = _run_alignment()
    content = export_alignment(
        result.items, fmt,
        source_name=str(data.get('source_name') or ''),
        target_name=str(data.get('target_name') or ''),
        options=options.to_dict(),
    )

    filename = f"alignment_errata.{fmt}"
    return Response(
        content,
        mimetype=MIME_TYPES[fmt],
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@align_blueprint.route('/defaults', methods=['GET'])
def defaults():
    """Default alignment options."""
    return jsonify({'success': True, 'options': AlignmentOptions().to_dict()})


@align_blueprint.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'success': True,
        'module': 'sentence_align',
        'version': __version__,
        'status': 'healthy',
        'export_formats': sorted(MIME_TYPES),
    })
