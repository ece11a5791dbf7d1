"""ROS 2 action client and server logic, wire time types and a .msg compiler."""

__version__ = "0.1.0"