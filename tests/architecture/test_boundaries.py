from pytest_archon import archrule


def test_types_are_storage_and_transport_free() -> None:
    """
    Ledger value types are plain data.
    They must not reach for the database, the RPC client or the object codec.
    """
    (
        archrule("types_isolation")
        .match("checkpoint_indexer.types*")
        .should_not_import("sqlalchemy*")
        .should_not_import("httpx*")
        .should_not_import("bson*")
        .check("checkpoint_indexer", only_direct_imports=True)
    )


def test_row_models_do_not_import_sqlalchemy() -> None:
    """
    Stored rows are validated values; the ORM mapping lives in ``schema``.
    """
    (
        archrule("row_models_isolation")
        .match("checkpoint_indexer.models")
        .should_not_import("sqlalchemy*")
        .check("checkpoint_indexer", only_direct_imports=True)
    )


def test_serialization_is_codec_only() -> None:
    (
        archrule("serialization_isolation")
        .match("checkpoint_indexer.serialization")
        .should_not_import("sqlalchemy*")
        .should_not_import("httpx*")
        .check("checkpoint_indexer", only_direct_imports=True)
    )


def test_rpc_does_not_touch_the_store() -> None:
    """
    The latest-checkpoint fetch talks to the full node only.
    """
    (
        archrule("rpc_isolation")
        .match("checkpoint_indexer.rpc")
        .should_not_import("sqlalchemy*")
        .should_not_import("checkpoint_indexer.pipeline*")
        .check("checkpoint_indexer", only_direct_imports=True)
    )


def test_pipeline_does_not_import_rpc() -> None:
    """
    Pipelines consume checkpoints; they never resolve where to start.
    """
    (
        archrule("pipeline_no_rpc")
        .match("checkpoint_indexer.pipeline*")
        .match("checkpoint_indexer.handlers")
        .should_not_import("httpx*")
        .should_not_import("checkpoint_indexer.rpc")
        .should_not_import("checkpoint_indexer.start")
        .check("checkpoint_indexer", only_direct_imports=True)
    )
