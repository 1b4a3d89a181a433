"""Parsers for headers, covariances, quaternions, poses and twists."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .parser_base import BuiltinMessageParser, WireReader
from .plotdata import PlotDataMap, PlotSeries
from .ros_type import BuiltinType

_F64 = BuiltinType.FLOAT64
_WRAP_ANGLE = math.pi * 2.0
_WRAP_THRESHOLD = math.pi * 1.95


def _zeros(count: int) -> Tuple[float, ...]:
    return (0.0,) * count


@dataclass
class Header:
    """Sequence number, stamp in seconds and frame of a stamped message."""

    seq: int = 0
    stamp: float = 0.0
    frame_id: str = ""

    @classmethod
    def read(cls, reader: WireReader) -> "Header":
        return cls(
            reader.read(BuiltinType.UINT32),
            reader.read(BuiltinType.TIME),
            reader.read_string(),
        )


@dataclass
class Vector3:
    """Three coordinates; also used for points."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def read(cls, reader: WireReader) -> "Vector3":
        return cls(*reader.read_array(_F64, 3))


@dataclass
class Quaternion:
    """A rotation as x, y, z, w."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    @classmethod
    def read(cls, reader: WireReader) -> "Quaternion":
        return cls(*reader.read_array(_F64, 4))


@dataclass
class Pose:
    """A position and an orientation."""

    position: Vector3 = field(default_factory=Vector3)
    orientation: Quaternion = field(default_factory=Quaternion)

    @classmethod
    def read(cls, reader: WireReader) -> "Pose":
        return cls(Vector3.read(reader), Quaternion.read(reader))


@dataclass
class PoseStamped:
    header: Header = field(default_factory=Header)
    pose: Pose = field(default_factory=Pose)

    @classmethod
    def read(cls, reader: WireReader) -> "PoseStamped":
        return cls(Header.read(reader), Pose.read(reader))


@dataclass
class PoseWithCovariance:
    pose: Pose = field(default_factory=Pose)
    covariance: Tuple[float, ...] = field(default_factory=lambda: _zeros(36))

    @classmethod
    def read(cls, reader: WireReader) -> "PoseWithCovariance":
        return cls(Pose.read(reader), tuple(reader.read_array(_F64, 36)))


@dataclass
class PoseWithCovarianceStamped:
    header: Header = field(default_factory=Header)
    pose: PoseWithCovariance = field(default_factory=PoseWithCovariance)

    @classmethod
    def read(cls, reader: WireReader) -> "PoseWithCovarianceStamped":
        return cls(Header.read(reader), PoseWithCovariance.read(reader))


@dataclass
class Twist:
    linear: Vector3 = field(default_factory=Vector3)
    angular: Vector3 = field(default_factory=Vector3)

    @classmethod
    def read(cls, reader: WireReader) -> "Twist":
        return cls(Vector3.read(reader), Vector3.read(reader))


@dataclass
class TwistStamped:
    header: Header = field(default_factory=Header)
    twist: Twist = field(default_factory=Twist)

    @classmethod
    def read(cls, reader: WireReader) -> "TwistStamped":
        return cls(Header.read(reader), Twist.read(reader))


@dataclass
class TwistWithCovariance:
    twist: Twist = field(default_factory=Twist)
    covariance: Tuple[float, ...] = field(default_factory=lambda: _zeros(36))

    @classmethod
    def read(cls, reader: WireReader) -> "TwistWithCovariance":
        return cls(Twist.read(reader), tuple(reader.read_array(_F64, 36)))


class HeaderMsgParser:
    """Stores seq, stamp and frame_id of a header under ``topic_name``."""

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        self.topic_name = topic_name
        self.plot_data = plot_data
        self._series: Optional[Tuple[PlotSeries, PlotSeries, PlotSeries]] = None

    def parse(self, msg: Header, timestamp: float, use_header_stamp: bool) -> float:
        """Store the header; return the header stamp when it is used, else ``timestamp``."""
        if self._series is None:
            self._series = (
                self.plot_data.get_or_create_numeric(self.topic_name + "/seq"),
                self.plot_data.get_or_create_numeric(self.topic_name + "/stamp"),
                self.plot_data.get_or_create_string_series(self.topic_name + "/frame_id"),
            )
        seq, stamp, frame_id = self._series
        header_stamp = msg.stamp
        if use_header_stamp and header_stamp > 0:
            timestamp = header_stamp
        seq.push_back((timestamp, float(msg.seq)))
        stamp.push_back((timestamp, header_stamp))
        frame_id.push_back((timestamp, msg.frame_id))
        return timestamp


class CovarianceParser:
    """Stores the upper triangle of a ``size`` x ``size`` covariance matrix."""

    def __init__(self, prefix: str, plot_data: PlotDataMap, size: int) -> None:
        self.prefix = prefix
        self.plot_data = plot_data
        self.size = size
        self._cells = [(i, j) for i in range(size) for j in range(i, size)]
        self._series: Optional[List[PlotSeries]] = None

    def parse(self, covariance: Sequence[float], timestamp: float) -> None:
        """Store the cells of the row-major ``covariance`` at ``timestamp``."""
        if len(covariance) != self.size * self.size:
            raise ValueError(
                f"covariance must hold {self.size * self.size} values, got {len(covariance)}"
            )
        if self._series is None:
            self._series = [
                self.plot_data.get_or_create_numeric(f"{self.prefix}[{i};{j}]")
                for i, j in self._cells
            ]
        for series, (i, j) in zip(self._series, self._cells):
            series.push_back((timestamp, covariance[i * self.size + j]))


class _FixedSeriesParser(BuiltinMessageParser):
    """A parser whose series are known in advance and created on first use."""

    SUFFIXES: Tuple[str, ...] = ()

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._series: Optional[List[PlotSeries]] = None

    def _fixed_series(self) -> List[PlotSeries]:
        if self._series is None:
            self._series = [self.get_series(self.topic_name + s) for s in self.SUFFIXES]
        return self._series


class QuaternionMsgParser(_FixedSeriesParser):
    """Stores the components of a quaternion and its unwrapped roll, pitch and yaw."""

    SUFFIXES = ("/x", "/y", "/z", "/w", "/roll_deg", "/pitch_deg", "/yaw_deg")

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._offsets = [0.0, 0.0, 0.0]
        self._previous = [0.0, 0.0, 0.0]

    def decode(self, reader: WireReader) -> Quaternion:
        return Quaternion.read(reader)

    def _unwrap(self, index: int, angle: float) -> float:
        if angle - self._previous[index] > _WRAP_THRESHOLD:
            self._offsets[index] -= _WRAP_ANGLE
        elif self._previous[index] - angle > _WRAP_THRESHOLD:
            self._offsets[index] += _WRAP_ANGLE
        self._previous[index] = angle
        return math.degrees(angle + self._offsets[index])

    def parse_message_impl(self, msg: Quaternion, timestamp: float) -> float:
        series = self._fixed_series()
        for s, v in zip(series, (msg.x, msg.y, msg.z, msg.w)):
            s.push_back((timestamp, v))

        x, y, z, w = msg.x, msg.y, msg.z, msg.w
        norm2 = w * w + x * x + y * y + z * z
        if abs(norm2 - 1.0) > sys.float_info.epsilon:
            mult = math.inf if norm2 == 0 else 1.0 / math.sqrt(norm2)
            x, y, z, w = x * mult, y * mult, z * mult, w * mult

        roll = math.atan2(2 * (w * x + y * z), 1 - 2 * (x * x + y * y))
        sinp = 2 * (w * y - z * x)
        if abs(sinp) >= 1:
            pitch = math.copysign(math.pi / 2, sinp)
        else:
            pitch = math.asin(sinp)
        yaw = math.atan2(2 * (w * z + x * y), 1 - 2 * (y * y + z * z))

        for s, i, angle in zip(series[4:], range(3), (roll, pitch, yaw)):
            s.push_back((timestamp, self._unwrap(i, angle)))
        return timestamp


class PoseMsgParser(_FixedSeriesParser):
    """Stores a position and, under ``/orientation``, its quaternion."""

    SUFFIXES = ("/position/x", "/position/y", "/position/z")

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._quat_parser = QuaternionMsgParser(topic_name + "/orientation", plot_data)

    def decode(self, reader: WireReader) -> Pose:
        return Pose.read(reader)

    def parse_message_impl(self, msg: Pose, timestamp: float) -> float:
        p = msg.position
        for s, v in zip(self._fixed_series(), (p.x, p.y, p.z)):
            s.push_back((timestamp, v))
        self._quat_parser.parse_message_impl(msg.orientation, timestamp)
        return timestamp


class PoseStampedMsgParser(BuiltinMessageParser):
    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._header_parser = HeaderMsgParser(topic_name + "/header", plot_data)
        self._pose_parser = PoseMsgParser(topic_name + "/pose", plot_data)

    def decode(self, reader: WireReader) -> PoseStamped:
        return PoseStamped.read(reader)

    def parse_message_impl(self, msg: PoseStamped, timestamp: float) -> float:
        timestamp = self._header_parser.parse(
            msg.header, timestamp, self.config.use_header_stamp
        )
        return self._pose_parser.parse_message_impl(msg.pose, timestamp)


class PoseCovarianceMsgParser(BuiltinMessageParser):
    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._pose_parser = PoseMsgParser(topic_name + "/pose", plot_data)
        self._covariance = CovarianceParser(topic_name + "/covariance", plot_data, 6)

    def decode(self, reader: WireReader) -> PoseWithCovariance:
        return PoseWithCovariance.read(reader)

    def parse_message_impl(self, msg: PoseWithCovariance, timestamp: float) -> float:
        self._pose_parser.parse_message_impl(msg.pose, timestamp)
        self._covariance.parse(msg.covariance, timestamp)
        return timestamp


class PoseCovarianceStampedMsgParser(BuiltinMessageParser):
    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._header_parser = HeaderMsgParser(topic_name + "/header", plot_data)
        self._pose_cov_parser = PoseCovarianceMsgParser(topic_name + "/pose", plot_data)

    def decode(self, reader: WireReader) -> PoseWithCovarianceStamped:
        return PoseWithCovarianceStamped.read(reader)

    def parse_message_impl(self, msg: PoseWithCovarianceStamped, timestamp: float) -> float:
        timestamp = self._header_parser.parse(
            msg.header, timestamp, self.config.use_header_stamp
        )
        return self._pose_cov_parser.parse_message_impl(msg.pose, timestamp)


class TwistMsgParser(_FixedSeriesParser):
    SUFFIXES = (
        "/linear/x",
        "/linear/y",
        "/linear/z",
        "/angular/x",
        "/angular/y",
        "/angular/z",
    )

    def decode(self, reader: WireReader) -> Twist:
        return Twist.read(reader)

    def parse_message_impl(self, msg: Twist, timestamp: float) -> float:
        lin, ang = msg.linear, msg.angular
        values = (lin.x, lin.y, lin.z, ang.x, ang.y, ang.z)
        for s, v in zip(self._fixed_series(), values):
            s.push_back((timestamp, v))
        return timestamp


class TwistStampedMsgParser(BuiltinMessageParser):
    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._header_parser = HeaderMsgParser(topic_name + "/header", plot_data)
        self._twist_parser = TwistMsgParser(topic_name + "/twist", plot_data)

    def decode(self, reader: WireReader) -> TwistStamped:
        return TwistStamped.read(reader)

    def parse_message_impl(self, msg: TwistStamped, timestamp: float) -> float:
        timestamp = self._header_parser.parse(
            msg.header, timestamp, self.config.use_header_stamp
        )
        return self._twist_parser.parse_message_impl(msg.twist, timestamp)


class TwistCovarianceMsgParser(BuiltinMessageParser):
    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._twist_parser = TwistMsgParser(topic_name + "/twist", plot_data)
        self._covariance = CovarianceParser(topic_name + "/covariance", plot_data, 6)

    def decode(self, reader: WireReader) -> TwistWithCovariance:
        return TwistWithCovariance.read(reader)

    def parse_message_impl(self, msg: TwistWithCovariance, timestamp: float) -> float:
        self._twist_parser.parse_message_impl(msg.twist, timestamp)
        self._covariance.parse(msg.covariance, timestamp)
        return timestamp