"""
Transient stores — the durable key-value slot the notice queue lives in.

Both backends expose the same three calls:

    get(key)                      -> value, or None when absent/expired
    set(key, value, expiration=0) -> True when the write landed
    delete(key)                   -> True when the key was removed

Values must be JSON-serialisable. expiration is in seconds; 0 never expires.
"""
import json
import logging
import threading
import time
from typing import Any

log = logging.getLogger("adminnotices.store")


class TransientStore:
    """Interface shared by the store backends."""

    def get(self, key: str) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any, expiration: int = 0) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError


class MemoryStore(TransientStore):
    """Process-local store. Values are JSON round-tripped so callers never share references."""

    def __init__(self):
        self._data: dict[str, tuple[str, float]] = {}   # key -> (json, expires_at; 0 = never)
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            raw, expires_at = entry
            if expires_at and expires_at <= time.time():
                del self._data[key]
                log.debug("Key %s expired", key)
                return None
        return json.loads(raw)

    def set(self, key: str, value: Any, expiration: int = 0) -> bool:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as exc:
            log.warning("Could not serialise value for %s: %s", key, exc)
            return False
        expires_at = time.time() + expiration if expiration > 0 else 0.0
        with self._lock:
            self._data[key] = (raw, expires_at)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None


def _k8s_core_v1():
    """Return a CoreV1Api client, loading config lazily."""
    from kubernetes import client, config as kube_config
    try:
        kube_config.load_incluster_config()
    except Exception:
        kube_config.load_kube_config()
    return client.CoreV1Api()


class ConfigMapStore(TransientStore):
    """
    Stores each key as a JSON data entry of a single ConfigMap.

    Writes are synchronous: create the ConfigMap, or patch it on 409.
    Expiration is accepted for interface parity but not enforced; ConfigMaps
    have no TTL.
    """

    def __init__(self, namespace: str, name: str = "admin-notices", core_v1=None):
        self.namespace = namespace
        self.name = name
        self._core_v1 = core_v1

    @property
    def core_v1(self):
        if self._core_v1 is None:
            self._core_v1 = _k8s_core_v1()
        return self._core_v1

    def get(self, key: str) -> Any:
        from kubernetes import client as k8s_client
        try:
            cm = self.core_v1.read_namespaced_config_map(self.name, self.namespace)
        except k8s_client.ApiException as e:
            if e.status != 404:
                log.warning("Could not read ConfigMap %s/%s: %s", self.namespace, self.name, e)
            return None
        except Exception as exc:
            log.warning("Could not read ConfigMap %s/%s: %s", self.namespace, self.name, exc)
            return None
        if not (cm.data and key in cm.data):
            return None
        try:
            return json.loads(cm.data[key])
        except ValueError as exc:
            log.warning("ConfigMap %s has unreadable %s entry: %s", self.name, key, exc)
            return None

    def set(self, key: str, value: Any, expiration: int = 0) -> bool:
        from kubernetes import client as k8s_client
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as exc:
            log.warning("Could not serialise value for %s: %s", key, exc)
            return False
        cm = k8s_client.V1ConfigMap(
            metadata=k8s_client.V1ObjectMeta(name=self.name, namespace=self.namespace),
            data={key: raw},
        )
        try:
            core_v1 = self.core_v1
            try:
                core_v1.create_namespaced_config_map(self.namespace, cm)
            except k8s_client.ApiException as e:
                if e.status == 409:
                    core_v1.patch_namespaced_config_map(self.name, self.namespace, cm)
                else:
                    raise
        except Exception as exc:
            log.warning("Could not persist %s to ConfigMap %s: %s", key, self.name, exc)
            return False
        log.debug("Persisted %s to ConfigMap %s/%s", key, self.namespace, self.name)
        return True

    def delete(self, key: str) -> bool:
        if self.get(key) is None:
            return False
        # A null value in a merge patch drops the entry.
        body = {"data": {key: None}}
        try:
            self.core_v1.patch_namespaced_config_map(self.name, self.namespace, body)
        except Exception as exc:
            log.warning("Could not delete %s from ConfigMap %s: %s", key, self.name, exc)
            return False
        return True


def make_store(settings) -> TransientStore:
    """Build the store backend named by settings.store."""
    if settings.store == "configmap":
        return ConfigMapStore(settings.namespace, settings.configmap)
    return MemoryStore()
