from showcase.exhibits.exchange.exporter import export_filename
from showcase.exhibits.exchange.exporter import serialize_exhibit
from showcase.exhibits.exchange.importer import ExhibitImporter
from showcase.exhibits.exchange.importer import import_exhibit
from showcase.exhibits.exchange.manifest import EXPORT_FORMAT_VERSION
from showcase.exhibits.exchange.reconcile import ReconciliationPlan
from showcase.exhibits.exchange.reconcile import reconcile

__all__ = [
    "EXPORT_FORMAT_VERSION",
    "ExhibitImporter",
    "ReconciliationPlan",
    "export_filename",
    "import_exhibit",
    "reconcile",
    "serialize_exhibit",
]
