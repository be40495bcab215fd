"""JSON 序列化器，供调用方持久化或返回定价快照 (MarketInputs / GreeksResult 等)。

类型转换规则:
| Python 类型    | JSON 表示                                            | 反序列化还原              |
|---------------|-----------------------------------------------------|--------------------------|
| pd.DataFrame  | {"__dataframe__": true, "records": [...]}            | pd.DataFrame(records)    |
| datetime      | {"__datetime__": "ISO 8601 字符串"}                   | datetime.fromisoformat   |
| date          | {"__date__": "ISO 8601 日期字符串"}                    | date.fromisoformat       |
| Enum          | {"__enum__": "module.ClassName.MEMBER"}              | 按模块路径还原             |
| dataclass     | {"__dataclass__": "module.ClassName", ...fields}     | 按模块路径还原             |
"""

import dataclasses
import importlib
import json
import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict

import pandas as pd

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 1


class _CustomEncoder(json.JSONEncoder):
    """自定义 JSON 编码器。Enum 与 dataclass 在编码前转为类型标记，default 处理 DataFrame、datetime、date。"""

    def default(self, o: Any) -> Any:
        if isinstance(o, pd.DataFrame):
            return {"__dataframe__": True, "records": o.to_dict(orient="records")}

        if isinstance(o, datetime):
            return {"__datetime__": o.isoformat()}

        if isinstance(o, date):
            return {"__date__": o.isoformat()}

        return super().default(o)

    def encode(self, o: Any) -> str:
        # str 混入型 Enum (OptionType 等) 不会进入 default，须在编码前转换
        return super().encode(_mark_types(o))

    def iterencode(self, o: Any, _one_shot: bool = False):
        return super().iterencode(_mark_types(o), _one_shot)


def _mark_types(o: Any) -> Any:
    """递归地把 Enum 和 dataclass 转为类型标记，dataclass 只按字段展开一层。"""
    if isinstance(o, Enum):
        return {"__enum__": f"{type(o).__module__}.{type(o).__qualname__}.{o.name}"}
    if dataclasses.is_dataclass(o) and not isinstance(o, type):
        module = type(o).__module__
        qualname = type(o).__qualname__
        fields = {f.name: _mark_types(getattr(o, f.name)) for f in dataclasses.fields(o)}
        return {"__dataclass__": f"{module}.{qualname}", **fields}
    if isinstance(o, dict):
        return {k: _mark_types(v) for k, v in o.items()}
    if isinstance(o, (list, tuple)):
        return [_mark_types(v) for v in o]
    return o


def _object_hook(obj: Dict[str, Any]) -> Any:
    """JSON 反序列化 object_hook，还原特殊类型标记。"""

    if obj.get("__dataframe__") is True and "records" in obj:
        records = obj["records"]
        return pd.DataFrame(records) if records else pd.DataFrame()

    if "__datetime__" in obj:
        return datetime.fromisoformat(obj["__datetime__"])

    if "__date__" in obj:
        return date.fromisoformat(obj["__date__"])

    if "__enum__" in obj:
        return _resolve_enum(obj["__enum__"])

    if "__dataclass__" in obj:
        return _resolve_dataclass(obj)

    return obj


def _resolve_class(fqn: str) -> Any:
    module_path, _, class_name = fqn.rpartition(".")
    if not module_path:
        return None
    try:
        mod = importlib.import_module(module_path)
        return getattr(mod, class_name)
    except (ImportError, AttributeError):
        logger.warning("无法还原类型，保留原始结构: %s", fqn)
        return None


def _resolve_enum(enum_ref: str) -> Any:
    """还原 Enum 值。enum_ref 格式: "module.ClassName.MEMBER"，找不到时返回原始字符串"""
    class_ref, _, member_name = enum_ref.rpartition(".")
    cls = _resolve_class(class_ref)
    if cls is None or not (isinstance(cls, type) and issubclass(cls, Enum)):
        return enum_ref
    try:
        return cls[member_name]
    except KeyError:
        return enum_ref


def _resolve_dataclass(obj: Dict[str, Any]) -> Any:
    """还原 dataclass 实例。obj 包含 "__dataclass__": "module.ClassName" 以及各字段。"""
    cls = _resolve_class(obj["__dataclass__"])
    if cls is None or not dataclasses.is_dataclass(cls):
        return obj

    fields = {k: v for k, v in obj.items() if k != "__dataclass__"}
    try:
        return cls(**fields)
    except (TypeError, ValueError):
        logger.warning("dataclass 字段不匹配，保留原始结构: %s", obj["__dataclass__"])
        return obj


class JsonSerializer:
    """JSON 序列化器，输出带 schema_version 的信封 {"schema_version": 1, "data": ...}。"""

    def serialize(self, data: Any) -> str:
        """序列化为 JSON 字符串。"""
        payload = {"schema_version": CURRENT_SCHEMA_VERSION, "data": data}
        return json.dumps(payload, cls=_CustomEncoder, ensure_ascii=False)

    def deserialize(self, json_str: str) -> Any:
        """从 JSON 字符串反序列化，返回信封中的 data。

        Raises:
            ValueError: 顶层不是信封对象，或 schema_version 高于当前支持的版本
        """
        payload = json.loads(json_str, object_hook=_object_hook)
        if not isinstance(payload, dict):
            raise ValueError(f"JSON 顶层必须为信封对象: {type(payload).__name__}")
        version = payload.get("schema_version", CURRENT_SCHEMA_VERSION)
        if version > CURRENT_SCHEMA_VERSION:
            raise ValueError(
                f"不支持的 schema_version: {version} (当前 {CURRENT_SCHEMA_VERSION})"
            )
        return payload.get("data")
