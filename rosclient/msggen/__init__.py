"""Parser for ROS 2 .msg definitions and the msggen struct generator."""