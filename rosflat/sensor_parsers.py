"""Parsers for IMU, odometry, joint state, transform and diagnostic messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .geometry_parsers import (
    CovarianceParser,
    Header,
    HeaderMsgParser,
    PoseCovarianceMsgParser,
    PoseWithCovariance,
    Quaternion,
    QuaternionMsgParser,
    TwistCovarianceMsgParser,
    TwistWithCovariance,
    Vector3,
)
from .parser_base import BuiltinMessageParser, MessageParser, WireReader, parse_double
from .plotdata import PlotDataMap, PlotSeries
from .ros_type import BuiltinType

_F64 = BuiltinType.FLOAT64


def _zeros(count: int) -> Tuple[float, ...]:
    return (0.0,) * count


@dataclass
class Imu:
    header: Header = field(default_factory=Header)
    orientation: Quaternion = field(default_factory=Quaternion)
    orientation_covariance: Tuple[float, ...] = field(default_factory=lambda: _zeros(9))
    angular_velocity: Vector3 = field(default_factory=Vector3)
    angular_velocity_covariance: Tuple[float, ...] = field(default_factory=lambda: _zeros(9))
    linear_acceleration: Vector3 = field(default_factory=Vector3)
    linear_acceleration_covariance: Tuple[float, ...] = field(
        default_factory=lambda: _zeros(9)
    )

    @classmethod
    def read(cls, reader: WireReader) -> "Imu":
        header = Header.read(reader)
        orientation = Quaternion.read(reader)
        orientation_cov = tuple(reader.read_array(_F64, 9))
        angular_velocity = Vector3.read(reader)
        angular_velocity_cov = tuple(reader.read_array(_F64, 9))
        linear_acceleration = Vector3.read(reader)
        linear_acceleration_cov = tuple(reader.read_array(_F64, 9))
        return cls(
            header,
            orientation,
            orientation_cov,
            angular_velocity,
            angular_velocity_cov,
            linear_acceleration,
            linear_acceleration_cov,
        )


@dataclass
class Odometry:
    header: Header = field(default_factory=Header)
    child_frame_id: str = ""
    pose: PoseWithCovariance = field(default_factory=PoseWithCovariance)
    twist: TwistWithCovariance = field(default_factory=TwistWithCovariance)

    @classmethod
    def read(cls, reader: WireReader) -> "Odometry":
        return cls(
            Header.read(reader),
            reader.read_string(),
            PoseWithCovariance.read(reader),
            TwistWithCovariance.read(reader),
        )


@dataclass
class JointState:
    header: Header = field(default_factory=Header)
    name: List[str] = field(default_factory=list)
    position: List[float] = field(default_factory=list)
    velocity: List[float] = field(default_factory=list)
    effort: List[float] = field(default_factory=list)

    @classmethod
    def read(cls, reader: WireReader) -> "JointState":
        return cls(
            Header.read(reader),
            reader.read_array(BuiltinType.STRING),
            reader.read_array(_F64),
            reader.read_array(_F64),
            reader.read_array(_F64),
        )


@dataclass
class TransformStamped:
    """A transform from ``header.frame_id`` to ``child_frame_id``."""

    header: Header = field(default_factory=Header)
    child_frame_id: str = ""
    translation: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion)

    @classmethod
    def read(cls, reader: WireReader) -> "TransformStamped":
        return cls(
            Header.read(reader),
            reader.read_string(),
            Vector3.read(reader),
            Quaternion.read(reader),
        )


@dataclass
class TFMessage:
    transforms: List[TransformStamped] = field(default_factory=list)

    @classmethod
    def read(cls, reader: WireReader) -> "TFMessage":
        count = reader.read(BuiltinType.UINT32)
        return cls([TransformStamped.read(reader) for _ in range(count)])


@dataclass
class KeyValue:
    key: str = ""
    value: str = ""

    @classmethod
    def read(cls, reader: WireReader) -> "KeyValue":
        return cls(reader.read_string(), reader.read_string())


@dataclass
class DiagnosticStatus:
    level: int = 0
    name: str = ""
    message: str = ""
    hardware_id: str = ""
    values: List[KeyValue] = field(default_factory=list)

    @classmethod
    def read(cls, reader: WireReader) -> "DiagnosticStatus":
        level = reader.read(BuiltinType.BYTE)
        name = reader.read_string()
        message = reader.read_string()
        hardware_id = reader.read_string()
        count = reader.read(BuiltinType.UINT32)
        return cls(level, name, message, hardware_id, [KeyValue.read(reader) for _ in range(count)])


@dataclass
class DiagnosticArray:
    header: Header = field(default_factory=Header)
    status: List[DiagnosticStatus] = field(default_factory=list)

    @classmethod
    def read(cls, reader: WireReader) -> "DiagnosticArray":
        header = Header.read(reader)
        count = reader.read(BuiltinType.UINT32)
        return cls(header, [DiagnosticStatus.read(reader) for _ in range(count)])


@dataclass
class StampedDiagnostic:
    status: int = 0
    stamp: float = 0.0
    key: str = ""
    value: str = ""

    @classmethod
    def read(cls, reader: WireReader) -> "StampedDiagnostic":
        return cls(
            reader.read(BuiltinType.UINT8),
            reader.read(BuiltinType.TIME),
            reader.read_string(),
            reader.read_string(),
        )


class ImuMsgParser(BuiltinMessageParser):
    """Stores angular velocity, linear acceleration, orientation and covariances."""

    _SUFFIXES = (
        "/angular_velocity/x",
        "/angular_velocity/y",
        "/angular_velocity/z",
        "/linear_acceleration/x",
        "/linear_acceleration/y",
        "/linear_acceleration/z",
    )

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._header_parser = HeaderMsgParser(topic_name + "/header", plot_data)
        self._quat_parser = QuaternionMsgParser(topic_name + "/orientation", plot_data)
        self._orientation_covariance = CovarianceParser(
            topic_name + "/orientation_covariance", plot_data, 3
        )
        self._lin_acc_covariance = CovarianceParser(
            topic_name + "/linear_acceleration_covariance", plot_data, 3
        )
        self._ang_vel_covariance = CovarianceParser(
            topic_name + "/angular_velocity_covariance", plot_data, 3
        )
        self._series: Optional[List[PlotSeries]] = None

    def decode(self, reader: WireReader) -> Imu:
        return Imu.read(reader)

    def parse_message_impl(self, msg: Imu, timestamp: float) -> float:
        if self._series is None:
            self._series = [self.get_series(self.topic_name + s) for s in self._SUFFIXES]
        timestamp = self._header_parser.parse(
            msg.header, timestamp, self.config.use_header_stamp
        )
        av, la = msg.angular_velocity, msg.linear_acceleration
        values = (av.x, av.y, av.z, la.x, la.y, la.z)
        for series, value in zip(self._series, values):
            series.push_back((timestamp, value))

        self._quat_parser.parse_message_impl(msg.orientation, timestamp)
        self._orientation_covariance.parse(msg.orientation_covariance, timestamp)
        self._lin_acc_covariance.parse(msg.linear_acceleration_covariance, timestamp)
        self._ang_vel_covariance.parse(msg.angular_velocity_covariance, timestamp)
        return timestamp


class OdometryMsgParser(BuiltinMessageParser):
    """Stores the header, pose and twist of an odometry message."""

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._header_parser = HeaderMsgParser(topic_name + "/header", plot_data)
        self._pose_parser = PoseCovarianceMsgParser(topic_name + "/pose", plot_data)
        self._twist_parser = TwistCovarianceMsgParser(topic_name + "/twist", plot_data)

    def decode(self, reader: WireReader) -> Odometry:
        return Odometry.read(reader)

    def parse_message_impl(self, msg: Odometry, timestamp: float) -> float:
        timestamp = self._header_parser.parse(
            msg.header, timestamp, self.config.use_header_stamp
        )
        self._pose_parser.parse_message_impl(msg.pose, timestamp)
        self._twist_parser.parse_message_impl(msg.twist, timestamp)
        return timestamp


class JointStateMsgParser(BuiltinMessageParser):
    """Stores position, velocity and effort of each named joint.

    A quantity is stored only when its list is as long as the list of names.
    """

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._header_parser = HeaderMsgParser(topic_name + "/header", plot_data)

    def decode(self, reader: WireReader) -> JointState:
        return JointState.read(reader)

    def parse_message_impl(self, msg: JointState, timestamp: float) -> float:
        timestamp = self._header_parser.parse(
            msg.header, timestamp, self.config.use_header_stamp
        )
        count = len(msg.name)
        quantities = [
            (suffix, values)
            for suffix, values in (
                ("/position", msg.position),
                ("/velocity", msg.velocity),
                ("/effort", msg.effort),
            )
            if len(values) == count
        ]
        for i, name in enumerate(msg.name):
            prefix = f"{self.topic_name}/{name}"
            for suffix, values in quantities:
                self.get_series(prefix + suffix).push_back((timestamp, values[i]))
        return timestamp


class TfMsgParser(BuiltinMessageParser):
    """Stores stamp, seq, translation and rotation of each transform."""

    def decode(self, reader: WireReader) -> TFMessage:
        return TFMessage.read(reader)

    def parse_message_impl(self, msg: TFMessage, timestamp: float) -> float:
        for trans in msg.transforms:
            header_stamp = trans.header.stamp
            if self.config.use_header_stamp and header_stamp > 0:
                timestamp = header_stamp

            if trans.header.frame_id:
                prefix = f"{self.topic_name}/{trans.header.frame_id}/{trans.child_frame_id}"
            else:
                prefix = f"{self.topic_name}/{trans.child_frame_id}"

            t, r = trans.translation, trans.rotation
            entries = (
                ("/header/stamp", header_stamp),
                ("/header/seq", float(trans.header.seq)),
                ("/translation/x", t.x),
                ("/translation/y", t.y),
                ("/translation/z", t.z),
                ("/rotation/x", r.x),
                ("/rotation/y", r.y),
                ("/rotation/z", r.z),
                ("/rotation/w", r.w),
            )
            for suffix, value in entries:
                self.get_series(prefix + suffix).push_back((timestamp, value))
        return timestamp


class Tf2MsgParser(TfMsgParser):
    """Parser of the tf2 transform message, which has the same layout."""


class DiagnosticMsgParser(BuiltinMessageParser):
    """Stores every key/value of every status, as a number when it reads as one."""

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        super().__init__(topic_name, plot_data)
        self._header_parser = HeaderMsgParser(topic_name + "/header", plot_data)

    def decode(self, reader: WireReader) -> DiagnosticArray:
        return DiagnosticArray.read(reader)

    def parse_message_impl(self, msg: DiagnosticArray, timestamp: float) -> float:
        timestamp = self._header_parser.parse(
            msg.header, timestamp, self.config.use_header_stamp
        )
        for status in msg.status:
            for kv in status.values:
                if status.hardware_id:
                    key = f"{self.topic_name}/{status.hardware_id}/{status.name}/{kv.key}"
                else:
                    key = f"{self.topic_name}/{status.name}/{kv.key}"
                value = parse_double(
                    kv.value,
                    self.config.remove_suffix_from_strings,
                    self.config.boolean_strings_to_number,
                )
                if value is not None:
                    self.get_series(key).push_back((timestamp, value))
                elif key not in self.plot_data.numeric:
                    self.get_string_series(key).push_back((timestamp, kv.value))
        return timestamp


class FiveAiDiagnosticMsg(MessageParser):
    """Stores the value and status of each stamped diagnostic at its own stamp."""

    def parse_message(self, data: bytes, timestamp: float) -> Optional[float]:
        reader = WireReader(data)
        count = reader.read(BuiltinType.UINT32)
        diagnostics = [StampedDiagnostic.read(reader) for _ in range(count)]

        for diag in diagnostics:
            timestamp = diag.stamp
            key = diag.key.replace(" ", "_")
            value_key = f"{self.topic_name}/{key}/value"
            value = parse_double(
                diag.value,
                self.config.remove_suffix_from_strings,
                self.config.boolean_strings_to_number,
            )
            if value is not None:
                self.get_series(value_key).push_back((timestamp, value))
            else:
                self.get_string_series(value_key).push_back((timestamp, diag.value))
            self.get_series(f"{self.topic_name}/{key}/status").push_back(
                (timestamp, float(diag.status))
            )
        return timestamp