import logging
import textwrap
from pathlib import Path

import pytest

from nino.inference import load_project
from nino.utils.logging import configure_logging

SOURCE_FILES = {
    "dataconnector.yaml": """
        version: v1
        dataconnectors:
          - name: source
            url: postgresql://app@prod:5432/shop
            readonly: true
            password:
              valueFromEnv: NINO_TEST_PASSWORD
          - name: target
            url: postgresql://app@qualif:5433/shop
            readonly: false
    """,
    "tables.yaml": """
        version: v1
        tables:
          - name: orders
            keys: [id]
            columns:
              - name: id
                export: numeric
              - name: total
          - name: customers
            keys: [id]
            columns:
              - name: id
              - name: name
                export: string
    """,
    "relations.yaml": """
        version: v1
        relations:
          - name: orders_customers
            parent:
              name: customers
            child:
              name: orders
    """,
    "orders-descriptor.yaml": """
        version: "1"
        seed: 42
        masking:
          - selector:
              jsonpath: "$.id"
            mask:
              regex: "[0-9]{5}"
    """,
    "analyze.yaml": """
        database: shop
        tables:
          - name: orders
            mainMetric:
              count: 10
            columns:
              - name: id
                mainMetric:
                  count: 10
                  min: 1
              - name: total
                mainMetric:
                  count: 10
                  min: 2.5
          - name: customers
            columns:
              - name: id
                mainMetric:
                  count: 4
                  min: 1
              - name: name
                mainMetric:
                  count: 4
                  min: Ann
                stringMetric:
                  lengths:
                    - length: 3
                      freq: 0.5
                    - length: 5
                      freq: 0.5
    """,
    "target-tables.yaml": """
        version: v1
        tables:
          - name: orders
            keys: [id]
            columns:
              - name: id
                export: string
              - name: total
    """,
    "target-analyze.yaml": """
        database: shop
        tables:
          - name: orders
            mainMetric:
              count: 10
            columns:
              - name: id
                mainMetric:
                  count: 10
                  min: 1
              - name: total
                mainMetric:
                  count: 10
                  min: 3.5
    """,
    "playbook.yaml": """
        - name: Shop masking
          hosts: localhost
          vars:
            source_db: postgresql://prod:5432/shop
            target_db: postgresql://qualif:5433/shop
          pre_tasks:
            - name: Start docker environment
            - name: Cron task
          roles:
            - name: OB-Live.nino
              vars:
                entities:
                  - name: customers
                  - name: orders
    """,
}

BILLING_FILES = {
    "tables.yaml": """
        version: v1
        tables:
          - name: invoices
            keys: [id]
            columns:
              - name: id
              - name: order_id
    """,
    "relations.yaml": """
        version: v1
        relations:
          - name: invoices_orders
            parent:
              name: orders
            child:
              name: invoices
          - name: invoices_ghosts
            parent:
              name: ghosts
            child:
              name: invoices
    """,
}


def write_files(directory: Path, files: dict) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (directory / name).write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")


@pytest.fixture(autouse=True)
def configure_nino_logging():
    """Route the nino logger through the root logger so caplog sees it."""
    logger = configure_logging(structured=False, level="INFO")
    logger.logger.propagate = True
    yield
    logging.getLogger("nino").propagate = False


@pytest.fixture
def workspace(tmp_path) -> Path:
    """Two-folder workspace: `source` with every descriptor kind, `billing` with a cross-folder relation."""
    root = tmp_path / "shop"
    write_files(root / "source", SOURCE_FILES)
    write_files(root / "billing", BILLING_FILES)
    return root


@pytest.fixture
def project(workspace):
    return load_project([str(workspace)])
