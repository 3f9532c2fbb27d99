"""
The VIEW layer: PySide6 widgets and the PyVista render adapter.
Everything that imports Qt or VTK lives here.
"""
