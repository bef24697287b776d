"""MIPI SyS-T building blocks: collateral catalogs, GUIDs, CRC-32C, printf emulation and CSV message rendering."""

__version__ = "0.1.0"