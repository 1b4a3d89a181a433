# rosflat

`rosflat` takes serialized ROS 1 messages and turns them into flat, named
time series that are ready to plot or analyse.

Each numeric field of a message becomes a series named after its path in the
message, such as `/imu/angular_velocity/x` or `/joints/arm/position`. Every
sample is stored as a `(timestamp, value)` pair. Text fields go into string
series. Where a parser reads text that holds a number, it stores the number
instead.

The package has no dependencies outside the standard library.

## Where the data goes

`rosflat.plotdata.PlotDataMap` holds the results. It has two dictionaries:

- `numeric` maps names to numeric series.
- `strings` maps names to string series.

`get_or_create_numeric(name)` and `get_or_create_string_series(name)` return
a series, and create it first if it does not exist. A
`rosflat.plotdata.PlotSeries` supports `len()`, indexing and iteration over
its `(timestamp, value)` points.

`rosflat.plotdata.ParserConfig` holds the options shared by the parsers:

- `use_header_stamp` (default `False`): use the header stamp of the message
  as the timestamp, when that stamp is greater than zero.
- `max_array_size` (default `100`): arrays longer than this are not stored in
  full. This applies to the introspection parser only.
- `discard_large_arrays` (default `True`): drop such arrays entirely instead
  of keeping their first `max_array_size` elements.
- `remove_suffix_from_strings` (default `False`): read text such as `"12.5 V"`
  as the number in front.
- `boolean_strings_to_number` (default `False`): read `"true"` as 1 and
  `"false"` as 0.

Each parser has a `config` attribute that holds a `ParserConfig`. Replace it
or change its fields to set the options.

## Parsers

Every parser is built from a topic name and a `PlotDataMap`. Its
`parse_message(data, timestamp)` method decodes the serialized bytes and
appends points to the map. It returns the timestamp it used, which may be the
header stamp. It returns `None` when the message was skipped.

### Built-in parsers

These parsers handle message types whose layout is known in advance. Each one
has `parse_message_impl(msg, timestamp)`, which takes an already decoded
message. The decoded messages are dataclasses, such as `Pose`, `Twist` and
`Imu`.

| Module | Parsers |
| --- | --- |
| `rosflat.geometry_parsers` | `QuaternionMsgParser`, `PoseMsgParser`, `PoseStampedMsgParser`, `PoseCovarianceMsgParser`, `PoseCovarianceStampedMsgParser`, `TwistMsgParser`, `TwistStampedMsgParser`, `TwistCovarianceMsgParser`, plus the helpers `HeaderMsgParser` and `CovarianceParser` |
| `rosflat.sensor_parsers` | `ImuMsgParser`, `OdometryMsgParser`, `JointStateMsgParser`, `TfMsgParser`, `Tf2MsgParser`, `DiagnosticMsgParser`, `FiveAiDiagnosticMsg` |
| `rosflat.statistics_parsers` | `PalStatisticsNamesParser`, `PalStatisticsValuesParser`, `PlotJugglerDictionaryParser`, `PlotJugglerDataPointsParser` |

Some of these parsers store values in a particular way:

- `QuaternionMsgParser` stores `x`, `y`, `z` and `w`. It also stores
  `roll_deg`, `pitch_deg` and `yaw_deg`, which are unwrapped across the ±180°
  boundary from one message to the next.
- `CovarianceParser` stores the upper triangle of the matrix as series named
  `prefix[i;j]`.
- The statistics parsers and the dictionary parsers pass names and
  dictionaries between topics. By default they use a store shared by the
  whole module. To use your own dictionary instead, pass it as `names_store`
  or `dictionaries`.

### Any message type

`rosflat.parser_base.IntrospectionParser(topic_name, topic_type, definition, plot_data)`
decodes any message from the full text of its definition.

`topic_type` is a name such as `my_pkg/Reading`. `definition` is the full
text of the definition. Nested definitions in it are separated by lines of
`=` and start with `MSG: pkg/Type`.

Elements of arrays are named `field.N`. Values that are NaN or infinite are
not stored.

```python
import struct

from rosflat.parser_base import IntrospectionParser
from rosflat.plotdata import PlotDataMap

plot_data = PlotDataMap()
parser = IntrospectionParser("/reading", "my_pkg/Reading", "float64 x\nfloat64 y", plot_data)
parser.parse_message(struct.pack("<2d", 1.5, -2.0), 10.0)

print(list(plot_data.numeric["/reading/x"]))  # [(10.0, 1.5)]
```

### Example with a built-in parser

```python
import struct

from rosflat.geometry_parsers import TwistMsgParser
from rosflat.plotdata import PlotDataMap

plot_data = PlotDataMap()
parser = TwistMsgParser("/cmd_vel", plot_data)
parser.parse_message(struct.pack("<6d", 0.5, 0, 0, 0, 0, 0.1), 12.5)

series = plot_data.get_or_create_numeric("/cmd_vel/linear/x")
print(len(series), series[0])  # 1 (12.5, 0.5)
```

## Lower-level pieces

### Reading definitions

- `rosflat.ros_type.ROSType` splits a type name into package and message.
- `rosflat.ros_field.ROSField` reads one definition line. It handles fields,
  constants, variable-length arrays and fixed-length arrays.
- `rosflat.ros_message.ROSMessage` reads a whole definition.

### Flat decoding

`rosflat.introspection.Parser` does the decoding:

- `register_message_definition` registers a definition under an identifier.
- `deserialize_into_flat_container` returns a `FlatMessage`. This holds
  numeric values, strings and byte blobs, each paired with a
  `rosflat.tree.StringTreeLeaf` that names it.
- `apply_visitor_to_buffer` calls a callback with the bytes of every
  sub-message of a given type.

### Renaming

`rosflat.renaming.RenamingParser` extends `Parser` with rules.

1. Register rules with `register_renaming_rules(type, rules)`. Each rule is a
   `rosflat.substitution_rule.SubstitutionRule(pattern, alias, substitution)`.
2. Call `apply_name_transform`. It names each array element after the string
   at the same index of another array. For example, joint positions can be
   named after the joint names.

## What it does not do

- It does not read bag files.
- It does not subscribe to live topics.
- It does not draw plots.
- It has no command-line program.
- It does not choose a parser from a topic's type name. You create the
  parser class that matches each topic and call its `parse_message` yourself.
- It decodes the ROS 1 wire format only.

## Installing

```
pip install .
```

## Running the tests

```
pip install .[test]
pytest
```