# DeepQL Source Package
"""
DeepQL - Deep Q-Network training core.

Modules:
- core: Abstract interfaces for function approximators and diagnostics sinks
- ai: Replay memory, target sync policies, error statistics and the DQN agent
- device: Device management (GPU/CPU detection)
- utils: Configuration and logging
- visualization: Diagnostics sinks (in-memory and terminal)
"""
