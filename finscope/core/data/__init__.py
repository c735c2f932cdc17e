"""Data access layer: price sources and persistence."""
