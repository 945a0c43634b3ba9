"""Pipeline activity functions.

Each module implements one stage of the conversion:
export_sheet, normalize_delimiter, decode_table, reproject,
build_features, write_geojson.
"""
