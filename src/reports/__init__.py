"""
Export formats for decoded entries.

- json_export: JSON document (and the inverse parser)
- html_export: Standalone HTML report with QR codes
"""
