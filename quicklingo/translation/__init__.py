"""
Translation module - Coordinating a translation against the result panel

This module provides:
- TranslationCoordinator: validates, runs and reports one translation
- ResultPanel / PanelOwner: the sink receiving updates, and its single owner
- PanelMessage: one update shown in the panel
"""

from quicklingo.translation.panel import PanelMessage, PanelOwner, ResultPanel, Sink
from quicklingo.translation.coordinator import TranslationCoordinator

__all__ = ['PanelMessage', 'PanelOwner', 'ResultPanel', 'Sink', 'TranslationCoordinator']
