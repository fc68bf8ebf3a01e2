"""외부 협력자 계약 및 구현체 (transport, favorites, cache, metadata)"""
