"""File formats for contact import/export: CSV, JSON and vCard."""

from kontak.formats.csv_format import export_csv, parse_csv, parse_csv_line
from kontak.formats.json_format import draft_from_mapping, export_json, parse_json
from kontak.formats.vcard import export_vcard, parse_vcard, split_name

# format key -> (parser, exporter, filename, media type)
FORMATS = {
    "csv": (parse_csv, export_csv, "kontak.csv", "text/csv"),
    "json": (parse_json, export_json, "kontak.json", "application/json"),
    "vcf": (parse_vcard, export_vcard, "kontak.vcf", "text/vcard"),
}

__all__ = [
    "FORMATS",
    "draft_from_mapping",
    "export_csv",
    "export_json",
    "export_vcard",
    "parse_csv",
    "parse_csv_line",
    "parse_json",
    "parse_vcard",
    "split_name",
]
