"""
Controller class for the Assembler application.
Handles user interactions and coordinates between Model and View.
"""

from model import AssemblerModel


class AssemblerController:
    def __init__(self, model=None, view=None):
        self.model = model if model is not None else AssemblerModel()
        if view is None:
            # tkinter is only needed when a real window is wanted
            from view import AssemblerView
            view = AssemblerView()
        self.view = view

        # Set up view callbacks
        self.view.set_load_callback(self.handle_load_file)
        self.view.set_assemble_callback(self.handle_assemble)

        # Initialize view with model data
        self.update_view()

    def handle_load_file(self):
        """Handle the load file button click"""
        file_paths = self.view.show_file_dialog()

        if file_paths:
            self.model.set_files(file_paths)
            self.view.update_status(self.model.get_status())
            self.view.set_button_state("assemble", "normal")
        else:
            if not self.model.is_file_loaded():
                self.model.set_status("No file selected")
                self.view.update_status(self.model.get_status())

    def handle_assemble(self):
        """Handle the assemble button click"""
        if not self.model.is_file_loaded():
            self.model.set_status("No file selected to run")
            self.view.update_status(self.model.get_status())
            return False

        # Disable assemble button during processing
        self.view.set_button_state("assemble", "disabled")

        success = self.model.assemble()

        self.view.update_status(self.model.get_status())
        self.view.show_report(self.model.get_report())

        self.view.set_button_state("assemble", "normal")

        return success

    def update_view(self):
        """Update the view with current model state"""
        self.view.update_status(self.model.get_status())

    def run(self):
        """Start the application"""
        self.view.run()
