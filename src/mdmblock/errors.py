class MdmBlockError(Exception):
    """Base exception for all mdmblock errors.

    All other exceptions in this package inherit from this class,
    allowing callers to catch all mdmblock-related errors with
    a single except clause.
    """


class BlockListLoadError(MdmBlockError):
    """Raised when a block list cannot be loaded or parsed.

    Common causes:
        - Invalid JSON syntax in the block list source
        - File not found or unreadable
        - Missing or non-list ``blocklist`` entry
        - A rule without a non-empty ``resourceType``
        - A field without a non-empty ``fhirPath`` or a string ``value``
        - Unsupported source type passed to ``load_block_list()``
    """


class PathEvaluationError(MdmBlockError):
    """Raised when a path expression cannot be evaluated against a record.

    Common causes:
        - Empty path or empty segment (``"name..family"``)
        - Unbalanced or non-integer indexer (``"name[x]"``)
        - Unsupported function (``"name.where()"``)
        - ``single()`` applied to more than one item

    The block rule evaluator never lets this escape: a condition whose
    path fails to evaluate simply does not match.
    """
