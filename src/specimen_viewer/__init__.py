"""Dataverse specimen viewer: model bundles, metadata trees and specimen summaries."""

__version__ = "0.1.0"
