#  Licensed to the Apache Software Foundation (ASF) under one
#  or more contributor license agreements.  See the NOTICE file
#  distributed with this work for additional information
#  regarding copyright ownership.  The ASF licenses this file
#  to you under the Apache License, Version 2.0 (the
#  "License"); you may not use this file except in compliance
#  with the License.  You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing,
#  software distributed under the License is distributed on an
#  "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
#  KIND, either express or implied.  See the License for the
#  specific language governing permissions and limitations
#  under the License.

"""
Backing Store Registry

This module provides registration and discovery of backing store implementations.
To add a new store, import it here and add it to the STORES dictionary.
"""

from typing import Optional, Type

from geobench.store_base import SpatialStore

# Import store implementations
from geobench.stores.duckdb_store import DuckDBStore
from geobench.stores.postgis_store import PostGISStore

# Registry of available stores
# Key: CLI argument name (lowercase)
# Value: Store class
STORES: dict[str, Type[SpatialStore]] = {
    "duckdb": DuckDBStore,
    "postgis": PostGISStore,
}


def get_store(name: str, dsn: Optional[str] = None) -> SpatialStore:
    """Get an instance of the specified store.

    Args:
        name: Store name (case-insensitive)
        dsn: Connection string or database path, interpreted by the store

    Returns:
        An unconnected instance of the requested store

    Raises:
        ValueError: If store name is not recognized
    """
    name_lower = name.lower()
    if name_lower not in STORES:
        available = ", ".join(sorted(STORES.keys()))
        raise ValueError(f"Unknown store '{name}'. Available stores: {available}")

    return STORES[name_lower](dsn=dsn)


def list_stores() -> list[str]:
    """Return list of available store names."""
    return sorted(STORES.keys())


__all__ = [
    "STORES",
    "get_store",
    "list_stores",
    "DuckDBStore",
    "PostGISStore",
]
