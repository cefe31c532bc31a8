"""
MQTT client wrapper for sending commands to a running meter service.

Handles MQTT connection, publishing, and disconnection.
"""

import json
import paho.mqtt.client as mqtt
from typing import Dict, Any, Optional


class MQTTCommandClient:
    """
    MQTT client for sending commands to the meter service.

    Publishes commands to the control plane topic with QoS 1.
    """

    def __init__(
        self,
        broker: str = "localhost",
        port: int = 1883,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 5.0,
    ):
        self.broker = broker
        self.port = port
        self.timeout = timeout

        self.client = mqtt.Client(callback_api_version=mqtt.CallbackAPIVersion.VERSION2)

        if username and password:
            self.client.username_pw_set(username, password)

    def send_command(
        self,
        topic: str,
        command: Dict[str, Any],
        qos: int = 1
    ) -> None:
        """
        Send command to MQTT topic.

        Args:
            topic: MQTT topic (e.g., "dialmeter/control/meter_01/commands")
            command: Command dictionary (will be JSON serialized)
            qos: Quality of Service (default: 1 for control commands)

        Raises:
            ConnectionError: If unable to reach the broker or publish in time
            ValueError: If command serialization fails
        """
        try:
            payload = json.dumps(command)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid command data: {e}")

        try:
            self.client.connect(self.broker, self.port, keepalive=60)
        except OSError as e:
            raise ConnectionError(
                f"Unable to connect to MQTT broker at {self.broker}:{self.port}. "
                f"Is mosquitto running? ({e})"
            )

        # QoS 1 needs the network loop running to complete the handshake
        self.client.loop_start()
        try:
            result = self.client.publish(topic, payload, qos=qos)
            try:
                result.wait_for_publish(timeout=self.timeout)
            except (RuntimeError, ValueError) as e:
                # paho raises when the message was dropped or the queue is full
                raise ConnectionError(
                    f"Command not sent to {self.broker}:{self.port} ({e})"
                )
            if not result.is_published():
                raise ConnectionError(
                    f"Command not acknowledged by {self.broker}:{self.port} "
                    f"within {self.timeout}s"
                )
        finally:
            self.client.disconnect()
            self.client.loop_stop()

        print(f"✅ Command sent: {command.get('command', 'unknown')}")
