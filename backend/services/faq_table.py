"""Static FAQ table served by the assistant."""
from typing import List

from models.faq import FAQ

FAQS: List[FAQ] = [
    FAQ(
        id="1",
        question="How do I book a tour?",
        answer="To book a tour, browse our tours, open your preferred tour card and click the "
               "\"Book Your Adventure\" button. You'll be guided through our secure booking process "
               "with payment options.",
        category="booking",
    ),
    FAQ(
        id="2",
        question="What payment methods do you accept?",
        answer="We accept all major credit cards (Visa, MasterCard, American Express), debit cards, "
               "UPI payments, net banking, and digital wallets like Paytm, PhonePe and Google Pay.",
        category="payment",
    ),
    FAQ(
        id="3",
        question="Can I cancel or modify my booking?",
        answer="Yes! You can cancel or modify your booking up to 24 hours before the tour date. "
               "Cancellations made 24+ hours in advance receive a full refund. Changes may be "
               "subject to availability.",
        category="booking",
    ),
    FAQ(
        id="4",
        question="Are your tours safe and insured?",
        answer="Absolutely! All our tours are fully insured and conducted by certified guides. We "
               "follow strict safety protocols and provide emergency support throughout your journey.",
        category="general",
    ),
    FAQ(
        id="5",
        question="What should I bring on the tour?",
        answer="Generally, bring comfortable walking shoes, weather-appropriate clothing, sunscreen, "
               "a water bottle and a camera. Specific requirements are listed in your tour details "
               "and confirmation email.",
        category="travel",
    ),
    FAQ(
        id="6",
        question="Do you offer group discounts?",
        answer="Yes! We offer special rates for groups of 6 or more people. Contact our support team "
               "with your group details for a customized quote.",
        category="booking",
    ),
    FAQ(
        id="7",
        question="What if the weather is bad?",
        answer="Tours typically run rain or shine, but in case of severe weather we may reschedule or "
               "offer a full refund. You'll be notified at least 2 hours before the tour start time.",
        category="travel",
    ),
    FAQ(
        id="8",
        question="How do I contact support?",
        answer="You can reach our 24/7 support team via this chat, by email at support@traveler.com, "
               "or on our helpline +91-9876543210. We typically respond within 30 minutes.",
        category="general",
    ),
    FAQ(
        id="9",
        question="What is your refund policy?",
        answer="Full refunds for cancellations 24+ hours before the tour. 50% refund for 12-24 hours "
               "notice. No refund for same-day cancellations except in emergencies or severe weather.",
        category="payment",
    ),
    FAQ(
        id="10",
        question="Do you provide hotel pickup?",
        answer="Yes! We offer complimentary hotel pickup and drop-off within city limits for most "
               "tours. Pickup times vary by location and are confirmed in your booking details.",
        category="travel",
    ),
    FAQ(
        id="11",
        question="Are meals included in tours?",
        answer="Meal inclusion varies by tour. Full-day tours typically include lunch, while half-day "
               "tours may include snacks. Check individual tour descriptions for meal details.",
        category="travel",
    ),
    FAQ(
        id="12",
        question="What languages do your guides speak?",
        answer="Our guides are multilingual and speak English, Hindi and local regional languages. "
               "For specific language requests, mention them during booking or contact support.",
        category="general",
    ),
    FAQ(
        id="13",
        question="Can I customize my tour itinerary?",
        answer="Absolutely! We offer customizable private tours. Contact our team with your "
               "preferences and we'll create a personalized itinerary for your interests and budget.",
        category="booking",
    ),
    FAQ(
        id="14",
        question="What is the minimum age for tours?",
        answer="Age requirements vary by tour type. Adventure tours typically require participants "
               "to be 12+, while cultural tours are family-friendly with no age restrictions.",
        category="general",
    ),
    FAQ(
        id="15",
        question="Do you offer student discounts?",
        answer="Yes! Students with valid ID cards get 10% off most tours. Senior citizens (60+) also "
               "receive special pricing. Present valid ID during booking to avail discounts.",
        category="payment",
    ),
    FAQ(
        id="16",
        question="How far in advance should I book?",
        answer="We recommend booking at least 3-7 days in advance to ensure availability, especially "
               "during peak seasons. Last-minute bookings are subject to availability.",
        category="booking",
    ),
    FAQ(
        id="17",
        question="What happens if I'm late for the tour?",
        answer="Please arrive 15 minutes before departure. Tours depart on schedule and we cannot "
               "guarantee waiting for late arrivals. Contact us immediately if you're running late.",
        category="travel",
    ),
    FAQ(
        id="18",
        question="Are tours wheelchair accessible?",
        answer="We offer several wheelchair-accessible tours and can accommodate special needs. "
               "Please inform us during booking so we can make proper arrangements.",
        category="general",
    ),
    FAQ(
        id="19",
        question="Can I get a tour certificate?",
        answer="Yes! We provide digital certificates of completion for all tours. Download them from "
               "your account or have them emailed within 24 hours of tour completion.",
        category="general",
    ),
    FAQ(
        id="20",
        question="What is your dress code policy?",
        answer="Dress comfortably and weather-appropriately. Modest clothing is required for "
               "religious sites. Specific dress guidelines are in your pre-tour information.",
        category="travel",
    ),
    FAQ(
        id="21",
        question="Do you offer photography services?",
        answer="Yes! Professional photography packages are available for an additional fee. Our "
               "photographers capture your memorable moments throughout the tour.",
        category="general",
    ),
    FAQ(
        id="22",
        question="What if I lose something during the tour?",
        answer="Contact our support immediately. We maintain a lost & found database and work with "
               "tour locations to recover lost items.",
        category="general",
    ),
    FAQ(
        id="23",
        question="Are there any hidden charges?",
        answer="No hidden fees! All costs are transparent and mentioned upfront. The only additional "
               "charges are for optional activities, meals not included, or personal purchases.",
        category="payment",
    ),
    FAQ(
        id="24",
        question="Can I bring my pet on tours?",
        answer="Pets are allowed on select outdoor tours only. Check tour descriptions or contact "
               "support to confirm pet-friendly options. Service animals are always welcome.",
        category="travel",
    ),
    FAQ(
        id="25",
        question="How do I leave a review?",
        answer="After your tour you'll receive an email with a review link. You can also log into "
               "your account and rate your experience.",
        category="general",
    ),
]
