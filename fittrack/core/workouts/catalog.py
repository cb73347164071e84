"""
Curated content shipped with the app: the exercise library and the
pre-built workout templates. Seeding only inserts items whose names are
not already present, so it is safe to run repeatedly.
"""

from .models import LibraryItem, TemplateExercise, WorkoutTemplate


DIFFICULTY_LEVELS = ("Beginner", "Intermediate", "Advanced")


def library_items() -> list[LibraryItem]:
    return [
        LibraryItem(
            name="Barbell Bench Press",
            category="Strength",
            primary_muscle="Chest",
            difficulty="Intermediate",
            equipment="Barbell",
            description="Press a barbell from chest level while lying on a flat bench.",
            tips="Keep your shoulder blades retracted and feet planted firmly.",
            common_mistakes="Flaring elbows too much; bouncing the bar off the chest.",
            popularity=95,
        ),
        LibraryItem(
            name="Back Squat",
            category="Strength",
            primary_muscle="Legs",
            difficulty="Intermediate",
            equipment="Barbell",
            description="Squat down with a barbell resting across your upper back.",
            tips="Drive knees out; keep chest up; brace core.",
            common_mistakes="Heels lifting; caving knees; rounding lower back.",
            popularity=98,
        ),
        LibraryItem(
            name="Deadlift",
            category="Strength",
            primary_muscle="Back",
            difficulty="Advanced",
            equipment="Barbell",
            description="Lift a barbell from the ground to hip level and back down.",
            tips="Hinge at the hips; keep bar close; neutral spine.",
            common_mistakes="Rounding back; jerking the bar; not locking out hips.",
            popularity=99,
        ),
        LibraryItem(
            name="Plank",
            category="Core",
            primary_muscle="Core",
            difficulty="Beginner",
            equipment="Bodyweight",
            description="Hold a straight-body position supported on forearms and toes.",
            tips="Squeeze glutes and keep hips level.",
            common_mistakes="Sagging hips; holding breath.",
            popularity=90,
        ),
        LibraryItem(
            name="Running",
            category="Cardio",
            primary_muscle="Legs",
            difficulty="Beginner",
            equipment="None",
            description="Steady-state or interval running outdoors or on a treadmill.",
            tips="Land under your hips with a relaxed stride.",
            common_mistakes="Overstriding; starting too fast.",
            popularity=92,
        ),
        LibraryItem(
            name="Shoulder Press (Dumbbell)",
            category="Strength",
            primary_muscle="Shoulders",
            difficulty="Beginner",
            equipment="Dumbbell",
            description="Press dumbbells overhead from shoulder height.",
            tips="Brace your core and avoid arching the lower back.",
            common_mistakes="Pressing forward instead of straight up.",
            popularity=85,
        ),
        LibraryItem(
            name="Pull-Up",
            category="Strength",
            primary_muscle="Back",
            difficulty="Intermediate",
            equipment="Bodyweight",
            description="Pull your body up until the chin clears the bar.",
            tips="Start from a dead hang and pull elbows toward your ribs.",
            common_mistakes="Kipping; partial range of motion.",
            popularity=88,
        ),
        LibraryItem(
            name="Bent-Over Row (Barbell)",
            category="Strength",
            primary_muscle="Back",
            difficulty="Intermediate",
            equipment="Barbell",
            description="Row a barbell to your lower chest from a hip-hinged position.",
            tips="Keep the torso still and the spine neutral.",
            common_mistakes="Using momentum; rounding the back.",
            popularity=80,
        ),
        LibraryItem(
            name="Romanian Deadlift",
            category="Strength",
            primary_muscle="Hamstrings",
            difficulty="Intermediate",
            equipment="Barbell",
            description="Hinge at the hips with soft knees, lowering the bar along the legs.",
            tips="Push hips back and feel the hamstring stretch.",
            common_mistakes="Squatting the movement; bar drifting away.",
            popularity=82,
        ),
        LibraryItem(
            name="Lat Pulldown",
            category="Strength",
            primary_muscle="Back",
            difficulty="Beginner",
            equipment="Machine",
            description="Pull a cable bar down to the upper chest while seated.",
            tips="Lead with the elbows; keep the chest up.",
            common_mistakes="Leaning far back; pulling behind the neck.",
            popularity=78,
        ),
        LibraryItem(
            name="Rowing Machine",
            category="Cardio",
            primary_muscle="Back",
            difficulty="Beginner",
            equipment="Machine",
            description="Full-body conditioning on an indoor rower.",
            tips="Legs, then body, then arms on the drive.",
            common_mistakes="Pulling with the arms first.",
            popularity=70,
        ),
        LibraryItem(
            name="Goblet Squat",
            category="Strength",
            primary_muscle="Legs",
            difficulty="Beginner",
            equipment="Dumbbell",
            description="Squat holding a dumbbell vertically against the chest.",
            tips="Sit between your heels; elbows inside the knees.",
            common_mistakes="Heels lifting; chest collapsing.",
            popularity=75,
        ),
    ]


def _ex(name, category, sets, reps, rest, order, weight=None, notes=None):
    return TemplateExercise(
        name=name,
        category=category,
        target_sets=sets,
        target_reps=reps,
        rest_seconds=rest,
        target_weight=weight,
        notes=notes,
        order=order,
    )


def prebuilt_templates() -> list[WorkoutTemplate]:
    return [
        WorkoutTemplate(
            name="PPL: Push Day",
            description="Chest, shoulders, triceps",
            category="Push/Pull/Legs",
            difficulty="Intermediate",
            estimated_duration=75,
            is_prebuilt=True,
            exercises=[
                _ex("Barbell Bench Press", "Strength", 4, "6-8", 180, 1),
                _ex("Shoulder Press (Dumbbell)", "Strength", 3, "8-10", 120, 2),
                _ex("Incline Dumbbell Press", "Strength", 3, "8-12", 90, 3),
                _ex("Triceps Pushdown", "Strength", 3, "10-12", 60, 4),
            ],
        ),
        WorkoutTemplate(
            name="PPL: Pull Day",
            description="Back and biceps",
            category="Push/Pull/Legs",
            difficulty="Intermediate",
            estimated_duration=70,
            is_prebuilt=True,
            exercises=[
                _ex("Deadlift", "Strength", 3, "5", 180, 1),
                _ex("Pull-Up", "Strength", 3, "6-10", 120, 2),
                _ex("Bent-Over Row (Barbell)", "Strength", 3, "8-10", 90, 3),
                _ex("Biceps Curl (Dumbbell)", "Strength", 3, "10-12", 60, 4),
            ],
        ),
        WorkoutTemplate(
            name="PPL: Leg Day",
            description="Complete lower body",
            category="Push/Pull/Legs",
            difficulty="Intermediate",
            estimated_duration=80,
            is_prebuilt=True,
            exercises=[
                _ex("Back Squat", "Strength", 4, "6-8", 180, 1),
                _ex("Romanian Deadlift", "Strength", 3, "8-10", 120, 2),
                _ex("Walking Lunges", "Strength", 3, "12", 90, 3),
                _ex("Calf Raise", "Strength", 4, "12-15", 60, 4),
            ],
        ),
        WorkoutTemplate(
            name="Full Body Beginner",
            description="Perfect starter routine",
            category="Full Body",
            difficulty="Beginner",
            estimated_duration=45,
            is_prebuilt=True,
            exercises=[
                _ex("Goblet Squat", "Strength", 3, "10-12", 90, 1),
                _ex("Lat Pulldown", "Strength", 3, "10-12", 90, 2),
                _ex("Shoulder Press (Dumbbell)", "Strength", 3, "10", 90, 3),
                _ex("Plank", "Core", 3, "1", 60, 4, notes="Hold 30-45 seconds"),
            ],
        ),
        WorkoutTemplate(
            name="Quick 30-Min Power",
            description="High-intensity for busy days",
            category="Quick Workout",
            difficulty="Intermediate",
            estimated_duration=30,
            is_prebuilt=True,
            exercises=[
                _ex("Back Squat", "Strength", 3, "5", 120, 1),
                _ex("Barbell Bench Press", "Strength", 3, "5", 120, 2),
                _ex("Kettlebell Swing", "Cardio", 3, "15", 60, 3),
            ],
        ),
    ]
