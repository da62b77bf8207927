"""
Service layer for candb.

Services:
- DbcLibrary: DBC ingestion/merge engine and frame/signal queries
- SignalService: Frame decoding into SignalValue records with a latest-value cache
"""

from candb.services.library import DbcLibrary
from candb.services.signal_service import SignalService

__all__ = ['DbcLibrary', 'SignalService']
